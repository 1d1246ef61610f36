"""Concourse resource that keeps a GitHub repository webhook in sync."""
__version__ = "0.1.0"
