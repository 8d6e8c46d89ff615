"""Backend service: text extraction, artifact storage and LLM analysis."""
