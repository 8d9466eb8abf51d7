"""Knowledge-base assistant: RAG chat over uploaded PDF documents."""

__version__ = "0.1.0"
