"""Amendment pipeline and batch orchestrator."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional

from contract_amender.config import get_settings
from contract_amender.core.engine import apply
from contract_amender.core.errors import AmendmentError, DocumentIOError
from contract_amender.core.locator import locate
from contract_amender.core.registry import (
    DocumentClass,
    Registry,
    default_registry,
    resolve_clauses,
)
from contract_amender.diagnostics import (
    DiagnosticEvent,
    EventKind,
    LoggingObserver,
    Observer,
)
from contract_amender.formats import FormatHandler, get_handler
from contract_amender.formatting.ir import Document


@dataclass(frozen=True)
class DocumentResult:
    """Outcome of one document in a batch."""

    path: Path
    output_path: Optional[Path] = None
    error: Optional[AmendmentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchResult:
    """Per-document outcomes, in input order."""

    results: tuple[DocumentResult, ...] = ()

    @property
    def output_paths(self) -> list[Path]:
        return [r.output_path for r in self.results if r.output_path is not None]

    @property
    def failures(self) -> list[DocumentResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failures

    def __iter__(self) -> Iterator[DocumentResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


class AmendmentPipeline:
    """Orchestrates the amendment pipeline.

    Pipeline, per document:
    1. Pick the document class (explicit name or registry classifier)
    2. Read the document into blocks and runs
    3. For each step: locate the anchor, resolve clause texts, apply the rule
    4. Write the result to the output directory under the same file name

    Documents are processed one at a time, in input order.
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        output_dir: Optional[Path] = None,
        fail_fast: Optional[bool] = None,
        observer: Optional[Observer] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            registry: Document classes to use (default: the built-in ones)
            output_dir: Where amended documents go (default from settings)
            fail_fast: Re-raise the first document failure instead of
                collecting it (default from settings)
            observer: Receives DiagnosticEvents (default: logging)
        """
        settings = get_settings()
        self.registry = registry if registry is not None else default_registry()
        self.output_dir = Path(output_dir) if output_dir is not None else settings.output_dir
        self.fail_fast = settings.fail_fast if fail_fast is None else fail_fast
        self.observer = observer or LoggingObserver()

    def _emit(
        self,
        kind: EventKind,
        message: str,
        level: int = logging.INFO,
        path: Optional[Path] = None,
        **detail,
    ) -> None:
        self.observer(
            DiagnosticEvent(kind=kind, message=message, level=level, path=path, detail=detail)
        )

    def ensure_output_dir(self) -> Path:
        """Create the output directory if needed. Safe to call repeatedly."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    def output_path_for(self, input_path: Path) -> Path:
        return self.output_dir / input_path.name

    def select_class(self, path: Path, document_class: Optional[str] = None) -> DocumentClass:
        if document_class is not None:
            return self.registry.get(document_class)
        return self.registry.classify(path)

    def _handler_for(self, path: Path) -> FormatHandler:
        try:
            return get_handler(path.suffix)()
        except ValueError as e:
            raise DocumentIOError(str(e), path=path) from e

    def amend(
        self,
        document: Document,
        document_class: DocumentClass,
        clauses: Optional[Mapping[str, str]] = None,
        path: Optional[Path] = None,
    ) -> Document:
        """Run every step of a document class against a document.

        Each step locates its anchor in the output of the previous step.
        """
        clauses = clauses or {}
        for number, step in enumerate(document_class.steps, start=1):
            rule = resolve_clauses(step.rule, clauses)
            anchor = locate(document, step.pattern)
            self._emit(
                EventKind.ANCHOR_LOCATED,
                f"Step {number}: matched {step.pattern} in block {anchor.block_index}",
                level=logging.DEBUG,
                path=path,
                step=number,
                pattern=str(step.pattern),
                block_index=anchor.block_index,
            )
            document = apply(document, anchor, rule)
            self._emit(
                EventKind.RULE_APPLIED,
                f"Step {number}: applied {type(rule).__name__}",
                level=logging.DEBUG,
                path=path,
                step=number,
                rule=type(rule).__name__,
                blocks=len(document.blocks),
            )
        return document

    def _report_failure(self, input_path: Path, error: AmendmentError) -> None:
        self._emit(
            EventKind.DOCUMENT_FAILED,
            f"Failed to amend {input_path.name}: {error.message}",
            level=logging.ERROR,
            path=input_path,
            error_kind=error.kind,
            pattern=error.pattern,
        )

    def _process(
        self,
        input_path: Path,
        clauses: Optional[Mapping[str, str]],
        document_class: Optional[str],
    ) -> Path:
        try:
            selected = self.select_class(input_path, document_class)
            self._emit(
                EventKind.DOCUMENT_STARTED,
                f"Amending {input_path.name} as {selected.name}",
                path=input_path,
                document_class=selected.name,
            )
            handler = self._handler_for(input_path)
            document = handler.read_document(input_path)
            document = self.amend(document, selected, clauses, path=input_path)
            output_path = self.output_path_for(input_path)
            handler.write(document, output_path)
        except AmendmentError as e:
            if e.path is None:
                e.path = input_path
            self._report_failure(input_path, e)
            raise
        except Exception as e:
            error = AmendmentError(
                f"Unexpected {type(e).__name__}: {e}", path=input_path
            )
            self._report_failure(input_path, error)
            raise error from e

        self._emit(
            EventKind.DOCUMENT_WRITTEN,
            f"Wrote {output_path}",
            path=input_path,
            output=str(output_path),
        )
        return output_path

    def process_document(
        self,
        input_path: Path,
        clauses: Optional[Mapping[str, str]] = None,
        document_class: Optional[str] = None,
    ) -> Path:
        """Amend a single document.

        Args:
            input_path: Document to amend
            clauses: Named clause texts ({"confidentiality": ..., ...})
            document_class: Registered class name; classified by path if omitted

        Returns:
            Path of the amended document

        Raises:
            AmendmentError: If any stage fails for this document; other
                exceptions are wrapped in one, with the original as cause
        """
        self.ensure_output_dir()
        return self._process(Path(input_path), clauses, document_class)

    def process_batch(
        self,
        paths: Iterable[Path],
        clauses: Optional[Mapping[str, str]] = None,
        document_class: Optional[str] = None,
    ) -> BatchResult:
        """Amend documents one after another, in the given order.

        Every document gets a DocumentResult. With ``fail_fast`` the first
        failure is re-raised and the remaining documents are not processed.
        """
        self.ensure_output_dir()
        results: list[DocumentResult] = []

        for path in paths:
            path = Path(path)
            try:
                output_path = self._process(path, clauses, document_class)
            except AmendmentError as e:
                results.append(DocumentResult(path=path, error=e))
                if self.fail_fast:
                    raise
            else:
                results.append(DocumentResult(path=path, output_path=output_path))

        batch = BatchResult(results=tuple(results))
        self._emit(
            EventKind.BATCH_COMPLETED,
            f"Batch complete: {len(batch.output_paths)} succeeded, "
            f"{len(batch.failures)} failed",
            level=logging.INFO if batch.ok else logging.WARNING,
            succeeded=len(batch.output_paths),
            failed=len(batch.failures),
        )
        return batch
