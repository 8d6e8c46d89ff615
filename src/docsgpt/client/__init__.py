"""Command-line client: state layer wiring, backend HTTP client and intent actions."""
