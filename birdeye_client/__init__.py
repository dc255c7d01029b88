from .api_client import BirdeyeClient
from .config import BirdeyeSettings, ClientConfig
from .constants import AddressType, Endpoint, IssueKind, SortBy, SortType, TimeInterval
from .exceptions import (
    ApiLevelFailure,
    BirdeyeError,
    DecodeError,
    ResponseValidationError,
    TransportError,
)
from .query import encode_query
from .validators import ResponseValidator

__version__ = "0.1.0"
