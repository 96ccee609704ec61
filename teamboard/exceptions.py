"""Exception hierarchy for the results board.

Every error carries structured context and a correction hint so that log
lines and CLI output can explain what went wrong upstream.
"""

from typing import Any


class TeamboardError(Exception):
    """Base exception for all board errors.

    Attributes:
        message: Human-readable error message.
        error_data: Structured error information.
        suggestion: Hint for how to resolve the error.
    """

    def __init__(
        self,
        message: str,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_data = error_data or {}
        self.suggestion = suggestion

    def __str__(self) -> str:
        """Return formatted error message with suggestion if available."""
        base = self.message
        if self.suggestion:
            return f"{base}\nSuggestion: {self.suggestion}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to structured dictionary for logging.

        Returns:
            Dictionary with error type, message, data, and suggestion.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_data": self.error_data,
            "suggestion": self.suggestion,
        }


class TransientTransportError(TeamboardError):
    """A single transport attempt failed in a way another path may not.

    Examples:
        - Request timeout
        - HTTP 404/500/502/503 from the API or a relay
        - Connection refused by a relay host
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize transport error.

        Args:
            message: Human-readable error message.
            url: The URL that failed.
            status_code: HTTP status code if applicable.
            retryable: Whether another transport might succeed.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update({"url": url, "status_code": status_code, "retryable": retryable})

        default_suggestion = suggestion or (
            "The next transport or candidate endpoint will be tried. "
            "If every path fails, check network connectivity and relay availability."
        )

        super().__init__(message, data, default_suggestion)
        self.url = url
        self.status_code = status_code
        self.retryable = retryable


class AuthError(TeamboardError):
    """The upstream API rejected the credential (HTTP 401/403).

    Authoritative: no further transports or candidates are attempted.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"url": url, "status_code": status_code})

        default_suggestion = suggestion or (
            "Access forbidden."
            if status_code == 403
            else "Invalid API key. Check the credential and its scheme prefix."
        )

        super().__init__(message, data, default_suggestion)
        self.url = url
        self.status_code = status_code


class ParseError(TeamboardError):
    """A 2xx response whose body could not be decoded as JSON.

    Handled exactly like a transient transport failure.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        snippet: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"url": url, "snippet": snippet[:200] if snippet else None})

        default_suggestion = suggestion or (
            "The response was not JSON. A relay may have returned an error page."
        )

        super().__init__(message, data, default_suggestion)
        self.url = url
        self.snippet = snippet


class ResultsUnavailableError(TeamboardError):
    """Team results could not be fetched from any candidate or transport."""

    def __init__(
        self,
        message: str,
        game_id: str | None = None,
        attempts: int = 0,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"game_id": game_id, "attempts": attempts})

        default_suggestion = suggestion or (
            "Check the game id and that the API or one of the relays is reachable."
        )

        super().__init__(message, data, default_suggestion)
        self.game_id = game_id
        self.attempts = attempts


class ConfigurationError(TeamboardError):
    """Invalid configuration or CLI arguments.

    Examples:
        - Unknown key in the settings file
        - Non-numeric timeout in an environment variable
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        expected_format: str | None = None,
        example: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize configuration error.

        Args:
            message: Human-readable error message.
            parameter: Parameter name that's invalid.
            expected_format: Expected format for the parameter.
            example: Example of valid value.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update(
            {
                "parameter": parameter,
                "expected_format": expected_format,
                "example": example,
            }
        )

        default_suggestion = suggestion or (
            f"Parameter '{parameter}' must be in format: {expected_format}. "
            f"Example: {example}"
            if parameter and expected_format and example
            else "Check the settings file and TEAMBOARD_* environment variables."
        )

        super().__init__(message, data, default_suggestion)
        self.parameter = parameter
        self.expected_format = expected_format
        self.example = example
