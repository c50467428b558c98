"""Judicio backend: HTTP gateway between legal-assistant clients and an LLM completion API."""

__version__ = "1.0.0"
