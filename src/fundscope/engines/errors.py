from __future__ import annotations


class FundEngineError(RuntimeError):
    """Base class for library-level fund engine errors."""

    code = "ENGINE_ERROR"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class FundEngineValidationError(FundEngineError):
    code = "VALIDATION_ERROR"


class OverlapInputError(FundEngineValidationError):
    code = "OVERLAP_INPUT_ERROR"
