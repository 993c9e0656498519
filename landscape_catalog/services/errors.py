"""
Classification of errors into user-facing messages, severity and retry hints.

Transport errors come straight from ``httpx``; shape and validation errors
are the catalog's own exception types. Nothing here retries or sleeps: the
retry delay is a hint for whoever schedules refreshes.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from landscape_catalog.domain.exceptions import (
    CatalogUnavailableError,
    DocumentShapeError,
    QueryValidationError,
)
from landscape_catalog.domain.models import ErrorSeverity

logger = logging.getLogger(__name__)


def _status_code(error: BaseException) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def friendly_message(error: BaseException) -> str:
    """
    Human-readable message for ``error``. Never exposes a raw traceback.
    """
    status = _status_code(error)
    if status is not None:
        if status == 404:
            return "Landscape data not found at the configured source URL."
        if status == 429:
            return "Rate limit exceeded. Please wait a moment before making more requests."
        if status >= 500:
            return "The landscape data source is experiencing issues. Please try again later."
        return f"Request failed: HTTP {status}"

    if isinstance(error, httpx.ConnectError):
        return "Cannot connect to the landscape data source. Please check your internet connection."

    if isinstance(error, httpx.TimeoutException):
        return "Request timeout. The landscape data source may be experiencing high load."

    if isinstance(error, httpx.TransportError):
        return f"Network error while fetching landscape data: {error}"

    if isinstance(error, DocumentShapeError):
        return "Error parsing landscape data. The data format may have changed recently."

    if isinstance(error, CatalogUnavailableError):
        return "No catalog entries available. Please try again later."

    if isinstance(error, (QueryValidationError, ValidationError, ValueError)):
        return f"Invalid request: {error}"

    return f"An error occurred: {error}"


def severity(error: BaseException) -> ErrorSeverity:
    if isinstance(error, (QueryValidationError, ValidationError, PermissionError)):
        return ErrorSeverity.LOW

    if isinstance(error, (httpx.ConnectError, httpx.TimeoutException)):
        return ErrorSeverity.MEDIUM

    status = _status_code(error)
    if status is not None:
        return ErrorSeverity.HIGH if status >= 500 else ErrorSeverity.MEDIUM

    if isinstance(error, httpx.TransportError):
        return ErrorSeverity.MEDIUM

    return ErrorSeverity.HIGH


def is_recoverable(error: BaseException) -> bool:
    """True for errors that a later retry could plausibly clear."""
    if isinstance(error, (httpx.ConnectError, httpx.TimeoutException)):
        return True
    status = _status_code(error)
    return status is not None and (status >= 500 or status == 429)


def retry_delay_seconds(error: BaseException) -> float:
    """Suggested delay before retrying after ``error``."""
    status = _status_code(error)
    if status is not None:
        if status == 429:
            return 5.0
        if status == 503:
            return 2.0
        return 1.0

    if isinstance(error, httpx.ConnectError):
        return 3.0

    if isinstance(error, httpx.TimeoutException):
        return 1.0

    return 1.0


def log_error(operation: str, error: BaseException) -> None:
    """Log ``error`` at a level matching its class."""
    message = friendly_message(error)

    if isinstance(error, (httpx.ConnectError, httpx.TimeoutException)):
        logger.warning(f"{operation}: {message}")
        return

    status = _status_code(error)
    if status is not None:
        if status >= 500:
            logger.error(f"{operation}: {message} (HTTP {status})")
        else:
            logger.info(f"{operation}: {message} (HTTP {status})")
        return

    if isinstance(error, (QueryValidationError, ValidationError)):
        logger.debug(f"{operation}: {message}")
        return

    logger.error(f"{operation}: {message}")
