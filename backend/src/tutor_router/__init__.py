"""Tutor Router: provider routing and health management for the tutoring backend."""

__version__ = "0.1.0"
