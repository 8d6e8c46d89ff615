"""docsgpt: upload documents, extract their text, and ask an LLM about them."""

__version__ = "0.1.0"
