"""Test documents."""
