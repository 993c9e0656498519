"""
Exception types raised by the catalog.

Transport errors are whatever the fetch client raises (``httpx`` exceptions);
they are not wrapped here because the refresh controller records them as-is.
"""
from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog errors."""


class DocumentShapeError(CatalogError):
    """The landscape document was fetched but is not usable JSON of the expected shape."""


class QueryValidationError(CatalogError, ValueError):
    """Malformed query parameters (keyword too short, blank project name, ...)."""


class CatalogUnavailableError(CatalogError):
    """No catalog entries are loaded, typically because every refresh so far failed."""
