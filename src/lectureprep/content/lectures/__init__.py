"""Lecture documents."""
