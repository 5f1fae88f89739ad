"""Async invokers for the Claude HTTP API, the Claude CLI and the Gemini API."""

__version__ = "0.1.0"
