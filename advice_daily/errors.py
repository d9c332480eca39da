"""Exceptions raised while fetching or copying advice."""

from __future__ import annotations

from .models import ErrorKind


class AdviceError(Exception):
    """Base class for user-visible advice failures."""

    kind: ErrorKind = ErrorKind.NETWORK_ERROR

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.kind.message)
        self.detail = detail

    @property
    def message(self) -> str:
        return self.kind.message


class NetworkError(AdviceError):
    kind = ErrorKind.NETWORK_ERROR


class EmptyResultError(AdviceError):
    kind = ErrorKind.EMPTY_RESULT


class CopyFailedError(AdviceError):
    kind = ErrorKind.COPY_FAILED
