"""Exception classes for the stars package."""

from collections.abc import Iterator


class StarsError(Exception):
    """Base exception for all stars errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(StarsError):
    """Raised when credentials or the local cache cannot be set up."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(StarsError):
    """Raised when the token is missing or rejected."""

    pass


class AuthorizationError(StarsError):
    """Raised when access is denied."""

    pass


class NotFoundError(StarsError):
    """Raised when a repository, user or organization is not found."""

    pass


class ConflictError(StarsError):
    """Raised on conflicting requests."""

    pass


class RateLimitedError(StarsError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(StarsError):
    """Raised on validation errors."""

    pass


class ServerError(StarsError):
    """Raised on server errors (5xx) and exhausted connection retries."""

    pass


class InvalidTargetError(StarsError):
    """Raised when a URL does not point at an owner/name repository."""

    def __init__(self, target: str) -> None:
        super().__init__("INVALID_TARGET", f"{target} is not a repository URL")
        self.target = target


class StoreError(StarsError):
    """Raised when the local cache cannot be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__("STORE_ERROR", message)


class NoResultsError(StarsError):
    """Raised when a query matches no cached stars."""

    def __init__(self, message: str = "No stars matching criteria found") -> None:
        super().__init__("NO_RESULTS", message)


class AggregateError(StarsError):
    """
    Combines every individual failure of a bulk operation.

    Bulk operations never stop at the first failure. Instead they collect
    each one and hand the caller a single AggregateError alongside their
    success count.
    """

    _PREVIEW = 3

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        preview = "; ".join(str(e) for e in self.errors[: self._PREVIEW])
        more = len(self.errors) - self._PREVIEW
        if more > 0:
            preview += f"; and {more} more"
        super().__init__(
            "AGGREGATE_ERROR", f"{len(self.errors)} operation(s) failed: {preview}"
        )

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[Exception]:
        return iter(self.errors)
