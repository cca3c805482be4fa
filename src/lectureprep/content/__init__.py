"""Bundled lecture and test content."""
