"""Typed errors raised by the real-income engine.

Every error carries an ``ErrorKind`` so callers can branch on the failure class
without matching on exception types or messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_RANGE = "invalid_range"
    GRANULARITY_MISMATCH = "granularity_mismatch"
    INVALID_COUNTRY_CODE = "invalid_country_code"
    SOURCE_UNAVAILABLE = "source_unavailable"
    INVALID_RESPONSE = "invalid_response"
    MISSING_DATA_POINT = "missing_data_point"
    INVALID_RATE = "invalid_rate"
    DIVISION_BY_ZERO = "division_by_zero"


class RealIncomeError(Exception):
    """Base class for all engine errors."""

    kind: ErrorKind

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InputValidationError(RealIncomeError):
    """Caller supplied inputs that can never succeed as given."""


class InvalidDateFormat(InputValidationError):
    kind = ErrorKind.INVALID_DATE_FORMAT


class InvalidRange(InputValidationError):
    kind = ErrorKind.INVALID_RANGE


class GranularityMismatch(InputValidationError):
    kind = ErrorKind.GRANULARITY_MISMATCH


class InvalidCountryCode(InputValidationError):
    kind = ErrorKind.INVALID_COUNTRY_CODE


class DataSourceError(RealIncomeError):
    """The data source could not be used; the caller may retry later."""


class SourceUnavailable(DataSourceError):
    kind = ErrorKind.SOURCE_UNAVAILABLE


class InvalidResponse(DataSourceError):
    kind = ErrorKind.INVALID_RESPONSE


class MissingDataPoint(RealIncomeError):
    """The source answered but lacks a datum the computation requires."""

    kind = ErrorKind.MISSING_DATA_POINT


class ComputationError(RealIncomeError):
    """Numeric guard tripped; the result would not be a finite positive amount."""


class InvalidRate(ComputationError):
    kind = ErrorKind.INVALID_RATE


class DivisionByZero(ComputationError):
    kind = ErrorKind.DIVISION_BY_ZERO
