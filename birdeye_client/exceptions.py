from collections import Counter
from typing import Any, List, Optional

from .constants import Endpoint
from .report_types import FieldIssue, ValidationFailureReport


class BirdeyeError(Exception):
    """Base class for every error raised by the Birdeye client."""


class TransportError(BirdeyeError):
    """Raised when the HTTP request could not be completed (DNS, connection, timeout)."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class DecodeError(BirdeyeError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseValidationError(BirdeyeError):
    """Raised when a decoded response does not match its endpoint contract."""

    def __init__(self, endpoint: Endpoint, issues: List[FieldIssue]):
        self.endpoint = endpoint
        self.issues = issues
        details = "; ".join(f"{issue['path']}: {issue['message']}" for issue in issues)
        super().__init__(f"{endpoint.value} response failed validation: {details}")

    @property
    def paths(self) -> List[str]:
        return [issue["path"] for issue in self.issues]

    def report(self) -> ValidationFailureReport:
        """
        Build a structured report of every contract violation.
        """

        counts = Counter(issue["kind"].value for issue in self.issues)
        return {
            "endpoint": self.endpoint.value,
            "error_count": len(self.issues),
            "counts": dict(counts),
            "issues": list(self.issues),
        }


class ApiLevelFailure(BirdeyeError):
    """
    Raised when the API answered but reported failure.

    Either the body validated with `success: false`, or the HTTP status was not 2xx.
    `response` holds the validated record when there is one.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[Endpoint] = None,
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code
        self.response = response
