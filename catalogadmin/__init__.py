"""Catalog admin - food product catalog administration backend."""

__version__ = "0.1.0"
