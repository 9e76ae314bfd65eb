"""Schema-aware audience segment SQL generation and validation."""

__version__ = "0.1.0"
