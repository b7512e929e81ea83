"""Newsroom CMS backend: auth guard, content lifecycle and HTTP API."""

__version__ = "0.1.0"
