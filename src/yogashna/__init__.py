"""Yogashna: backend service for guided yoga practice."""

__version__ = "0.1.0"
