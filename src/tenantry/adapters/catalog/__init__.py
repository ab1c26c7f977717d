"""Catalog repository adapters."""

from .postgres import PostgresCatalogRepository

__all__ = ["PostgresCatalogRepository"]
