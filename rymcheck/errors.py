from __future__ import annotations

from typing import Optional


class RymcheckError(RuntimeError):
    pass


class CatalogError(RymcheckError):
    """Any failure while fetching the local catalog. The whole fetch is void."""


class TransportError(CatalogError):
    pass


class AuthError(CatalogError):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(CatalogError):
    pass


class FetchCancelled(CatalogError):
    pass


class InputFormatError(RymcheckError):
    def __init__(
        self,
        message: str,
        row: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.row = row
        self.expected = expected
        self.actual = actual
