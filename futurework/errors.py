from __future__ import annotations


class FutureWorkError(RuntimeError):
    pass


class PredictionFailure(FutureWorkError):
    """The model call failed or its payload could not be parsed."""


class StoreUnavailable(FutureWorkError):
    """A spreadsheet create/append/overwrite/read call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthRequired(FutureWorkError):
    """No usable Sheets access token is available."""
