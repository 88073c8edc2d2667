"""Shared services: money helpers, catalog models, notification sinks."""
