"""Exception hierarchy shared by the provider adapters and the facade."""

from typing import Any


class HypothesisCheckerError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(HypothesisCheckerError):
    """Missing contact email, unknown provider or an invalid profile."""


class ProviderError(HypothesisCheckerError):
    """A failure talking to one of the search providers."""

    def __init__(
        self,
        provider: str,
        message: str,
        params: dict[str, Any] | None = None,
    ):
        self.provider = provider
        self.params = dict(params or {})
        super().__init__(f"{provider}: {message}")


class ProviderHttpError(ProviderError):
    """Non-2xx response, or no response at all (``status_code`` is None)."""

    def __init__(
        self,
        provider: str,
        status_code: int | None,
        body: str = "",
        params: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"request failed: {body}"
        else:
            message = f"HTTP {status_code} {body[:200]}".rstrip()
        super().__init__(provider, message, params)


class RateLimitError(ProviderHttpError):
    """HTTP 429 from the provider (or passed through by the relay)."""

    def __init__(self, provider: str, body: str = "", params: dict[str, Any] | None = None):
        super().__init__(provider, 429, body, params)


class MalformedResponseError(ProviderError):
    """Response body is not JSON, or not the JSON shape we expect."""

    def __init__(self, provider: str, detail: str, params: dict[str, Any] | None = None):
        self.detail = detail
        super().__init__(provider, f"malformed response: {detail}", params)


class SearchFailedError(ProviderError):
    """Retries exhausted; ``cause`` is the last underlying failure."""

    def __init__(
        self,
        provider: str,
        cause: Exception,
        attempts: int,
        params: dict[str, Any] | None = None,
    ):
        self.cause = cause
        self.attempts = attempts
        super().__init__(
            provider, f"search failed after {attempts} attempts: {cause}", params
        )
        self.__cause__ = cause

    @property
    def status_code(self) -> int | None:
        return getattr(self.cause, "status_code", None)

    @property
    def body(self) -> str:
        return getattr(self.cause, "body", "")


class SearchCancelledError(ProviderError):
    """The caller's cancellation token tripped between attempts."""

    def __init__(self, provider: str, attempts: int, params: dict[str, Any] | None = None):
        self.attempts = attempts
        super().__init__(provider, f"search cancelled after {attempts} attempts", params)
