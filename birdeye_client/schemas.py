import math
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic_core import PydanticCustomError


def _from_epoch_seconds(value: Any) -> Any:
    # numbers are always epoch seconds, never milliseconds
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if not math.isfinite(value):
        raise PydanticCustomError("datetime_from_epoch", "Epoch seconds must be finite, got {value}", {"value": value})
    try:
        return datetime.fromtimestamp(value, timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise PydanticCustomError("datetime_from_epoch", "Epoch seconds out of range: {value}", {"value": value})


def _assume_utc(value: datetime) -> datetime:
    # naive ISO strings are read as UTC so .timestamp() gives back the epoch the API sent
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Accepts epoch seconds or an ISO-8601 string
Timestamp = Annotated[datetime, BeforeValidator(_from_epoch_seconds), AfterValidator(_assume_utc)]


class StrictSchema(BaseModel):
    """
    Base for Birdeye response contracts.

    - Unknown fields are rejected, so vendor shape changes fail loudly
    - Records are immutable once validated

    Optional fields default to None without admitting null: an absent key
    reads as None and stays out of `model_fields_set`, an explicit null fails.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class NetworksResponse(StrictSchema):
    """
    Response format for /defi/networks.

    Reference: https://docs.birdeye.so/reference/get_defi-networks
    """

    success: StrictBool
    data: List[StrictStr]


class PriceData(StrictSchema):
    value: StrictFloat
    updateUnixTime: StrictInt
    updateHumanTime: Timestamp
    liquidity: StrictFloat = None


class PriceResponse(StrictSchema):
    """
    Response format for /defi/price.

    Reference: https://docs.birdeye.so/reference/get_defi-price
    """

    success: StrictBool
    data: PriceData


class TokenListItem(StrictSchema):
    """
    One token entry of /defi/tokenlist.
    """

    address: StrictStr
    decimals: StrictInt
    lastTradeUnixTime: StrictInt
    liquidity: StrictFloat = None
    logoURI: StrictStr
    mc: StrictFloat

    # nullable: key must be present, value may be null
    name: Optional[StrictStr]
    symbol: Optional[StrictStr]
    v24hChangePercent: Optional[StrictFloat]

    v24hUSD: StrictFloat


class TokenListData(StrictSchema):
    updateUnixTime: StrictInt
    updateTime: Timestamp
    tokens: List[TokenListItem]
    total: StrictInt


class TokenListResponse(StrictSchema):
    """
    Response format for /defi/tokenlist.

    Reference: https://docs.birdeye.so/reference/get_defi-tokenlist
    """

    success: StrictBool
    message: StrictStr = None
    data: TokenListData


class HistoryPriceItem(StrictSchema):
    unixTime: StrictInt
    value: StrictFloat


class HistoryPriceData(StrictSchema):
    items: List[HistoryPriceItem]


class HistoryPriceResponse(StrictSchema):
    """
    Response format for /defi/history_price.

    Reference: https://docs.birdeye.so/reference/get_defi-history-price
    """

    success: StrictBool
    data: HistoryPriceData


class MultiPriceResponse(StrictSchema):
    """
    Response format for /defi/multi_price.

    `data` may be absent, typically together with `success: false` and a `message`.

    Reference: https://docs.birdeye.so/reference/get_defi-multi-price
    """

    success: StrictBool
    message: StrictStr = None
    data: List[PriceData] = None
