"""Conservation investment opportunity ingestion: LLM candidates in, validated and scored opportunities out."""

__version__ = "0.1.0"
