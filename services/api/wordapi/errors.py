"""Domain errors and their HTTP mapping.

Each error carries the status code and machine-readable code used by the
structured error envelope (see schemas.common.ErrorResponse).
"""

from typing import Any


class WordApiError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class StoreNotReady(WordApiError):
    """The category store could not be reached or initialized."""

    status_code = 503
    code = "STORE_NOT_READY"

    def __init__(self, message: str = "DB not ready", detail: dict[str, Any] | None = None):
        super().__init__(message, detail)


class InvalidCategoryInput(WordApiError):
    status_code = 400
    code = "INVALID_INPUT"

    def __init__(
        self,
        message: str = "Invalid categoryName or words array",
        detail: dict[str, Any] | None = None,
    ):
        super().__init__(message, detail)


class CategoryConflict(WordApiError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, category_name: str):
        self.category_name = category_name
        super().__init__("categoryName already exists", {"categoryName": category_name})


class ProviderError(RuntimeError):
    """A generation provider failed. Never leaves the provider chain."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")
