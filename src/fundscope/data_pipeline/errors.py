from __future__ import annotations


class FundPipelineError(Exception):
    """Base error for the fund fetch/normalize pipeline."""


class FetchError(FundPipelineError):
    """Raised when a remote fetch operation fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        classification: str = "unknown",
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.classification = classification
        self.url = url


class SchemaValidationError(FundPipelineError):
    """Raised when a payload or dataset does not satisfy schema constraints."""
