"""Command-line interface for node-doctor."""
