"""Contract Amender - anchor-driven clause insertion for Word documents."""

__version__ = "0.1.0"
