"""Snippet storage, search and execution for SSH connections."""
