from typing import Any, Dict, List, TypedDict

from .constants import IssueKind


class FieldIssue(TypedDict):
    """
    A single contract violation found in a response body.
    """

    path: str  # dotted location, e.g. "data.tokens[0].name"
    kind: IssueKind
    message: str
    input: Any


class ValidationFailureReport(TypedDict):
    """
    Report structure for a response that failed its endpoint contract.
    """

    endpoint: str
    error_count: int
    counts: Dict[str, int]
    issues: List[FieldIssue]
