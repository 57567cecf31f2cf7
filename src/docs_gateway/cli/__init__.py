"""Command-line interface for docs-gateway."""
