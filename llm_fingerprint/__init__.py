"""LLM business visibility fingerprinting."""

__version__ = "1.0.0"
