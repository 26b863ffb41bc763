"""Observability helpers."""

from .logging import JsonLogFormatter, configure_logging

__all__ = ["JsonLogFormatter", "configure_logging"]
