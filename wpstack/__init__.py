"""wpstack: task runner and container entrypoints for a TLS-fronted WordPress stack."""

__version__ = "0.1.0"
