"""Command line interface for humangate."""
