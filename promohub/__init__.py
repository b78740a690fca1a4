"""Promotion tracking HTTP API on SQLite, with a student records API, a
health-checked web service and an arithmetic problem arranger."""

__version__ = "0.1.0"