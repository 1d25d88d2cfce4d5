"""Catalog subpackage - rate templates and currency preferences."""
from .rate_catalog import RateCatalog

__all__ = ['RateCatalog']
