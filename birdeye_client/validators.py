import logging
from typing import Any, Dict, Tuple, Type, Union

from pydantic import ValidationError

from .constants import Endpoint, IssueKind
from .exceptions import ResponseValidationError
from .report_types import FieldIssue
from .schemas import (
    HistoryPriceResponse,
    MultiPriceResponse,
    NetworksResponse,
    PriceResponse,
    StrictSchema,
    TokenListResponse,
)

logger = logging.getLogger("birdeye_response_validator")


class ResponseValidator:
    """Validates decoded Birdeye responses against per-endpoint contracts"""

    # Contract per endpoint
    CONTRACTS: Dict[Endpoint, Type[StrictSchema]] = {
        Endpoint.NETWORKS: NetworksResponse,
        Endpoint.PRICE: PriceResponse,
        Endpoint.TOKEN_LIST: TokenListResponse,
        Endpoint.HISTORY_PRICE: HistoryPriceResponse,
        Endpoint.MULTI_PRICE: MultiPriceResponse,
    }

    # pydantic error types that map to a specific issue kind; anything else is a type mismatch
    ERROR_KINDS = {
        'missing': IssueKind.MISSING,
        'extra_forbidden': IssueKind.UNEXPECTED,
    }


    def validate(self, endpoint: Endpoint, payload: Any) -> StrictSchema:
        """
        Validate a decoded JSON value against the endpoint's contract.

        Args:
            endpoint: Endpoint the payload was fetched from.
            payload: Decoded JSON body.

        Returns:
            The contract model instance for the endpoint.

        Raises:
            ResponseValidationError: If the payload has unknown fields, misses
                required ones, carries wrong types or an unparseable datetime.
        """

        contract = self.CONTRACTS[endpoint]

        try:
            result = contract.model_validate(payload)
        except ValidationError as e:
            issues = [self._to_issue(error) for error in e.errors()]
            logger.warning(f"Response validation failed for {endpoint.value}: {len(issues)} issue(s)")
            raise ResponseValidationError(endpoint, issues) from e

        logger.debug(f"Response validation passed for {endpoint.value}")
        return result


    def _to_issue(self, error: Dict[str, Any]) -> FieldIssue:
        """
        Convert a pydantic error entry into a FieldIssue.
        """

        error_type = error['type']
        if error_type.startswith('datetime'):
            kind = IssueKind.COERCION
        else:
            kind = self.ERROR_KINDS.get(error_type, IssueKind.WRONG_TYPE)

        if kind == IssueKind.MISSING:
            message = "missing required field"
        elif kind == IssueKind.UNEXPECTED:
            message = "unexpected field"
        else:
            message = error['msg']

        return {
            'path': format_path(error['loc']),
            'kind': kind,
            'message': message,
            # for missing fields pydantic reports the parent object, which is noise here
            'input': None if kind == IssueKind.MISSING else error.get('input'),
        }


def format_path(loc: Tuple[Union[str, int], ...]) -> str:
    """
    Render a pydantic location tuple as "data.tokens[0].name".
    """

    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path or "<root>"
