"""Command-line quiz manager with a local shell and a TCP server."""
