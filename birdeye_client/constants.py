from enum import Enum

BASE_URL = "https://public-api.birdeye.so"
DEFAULT_CHAIN = "solana"
DEFAULT_TIMEOUT = 30

# /defi/multi_price accepts at most this many addresses per call
MAX_MULTI_PRICE_ADDRESSES = 100


class Endpoint(str, Enum):
    """
    Fixed Birdeye API paths, one per client operation.
    """

    NETWORKS = "/defi/networks"
    PRICE = "/defi/price"
    TOKEN_LIST = "/defi/tokenlist"
    HISTORY_PRICE = "/defi/history_price"
    MULTI_PRICE = "/defi/multi_price"


class SortBy(str, Enum):
    """
    Sort keys accepted by /defi/tokenlist.
    """

    V24H_USD = "v24hUSD"
    MC = "mc"
    V24H_CHANGE_PERCENT = "v24hChangePercent"


class SortType(str, Enum):
    ASC = "asc"
    DESC = "desc"


class AddressType(str, Enum):
    TOKEN = "token"
    PAIR = "pair"


class TimeInterval(str, Enum):
    """
    Candle intervals accepted by /defi/history_price (the `type` parameter).
    """

    ONE_MINUTE = "1m"
    THREE_MINUTES = "3m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1H"
    TWO_HOURS = "2H"
    FOUR_HOURS = "4H"
    SIX_HOURS = "6H"
    EIGHT_HOURS = "8H"
    TWELVE_HOURS = "12H"
    ONE_DAY = "1D"
    THREE_DAYS = "3D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"


class IssueKind(str, Enum):
    """
    Nature of a single response validation failure.
    """

    MISSING = "missing"
    UNEXPECTED = "unexpected"
    WRONG_TYPE = "wrong_type"
    COERCION = "coercion"
