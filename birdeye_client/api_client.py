import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import requests

from .config import BirdeyeSettings, ClientConfig
from .constants import (
    BASE_URL,
    DEFAULT_CHAIN,
    DEFAULT_TIMEOUT,
    MAX_MULTI_PRICE_ADDRESSES,
    AddressType,
    Endpoint,
    SortBy,
    SortType,
    TimeInterval,
)
from .exceptions import ApiLevelFailure, DecodeError, TransportError
from .query import QueryValue, encode_query
from .schemas import (
    HistoryPriceResponse,
    MultiPriceResponse,
    NetworksResponse,
    PriceResponse,
    StrictSchema,
    TokenListResponse,
)
from .validators import ResponseValidator

logger = logging.getLogger("api_client")


def _flag(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "true" if value else "false"


def _epoch_seconds(value: datetime) -> int:
    return math.floor(value.timestamp())


class BirdeyeClient:
    """
    Client for the Birdeye public API (https://docs.birdeye.so/reference).

    Free accounts can only access /defi/networks, /defi/price, /defi/tokenlist
    and /defi/history_price; /defi/multi_price needs a premium key.
    """

    BASE_URL = BASE_URL
    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        api_key: str,
        chain: str = DEFAULT_CHAIN,
        timeout: float = DEFAULT_TIMEOUT,
        validator: Optional[ResponseValidator] = None,
    ):
        self.config = ClientConfig(api_key=api_key, default_chain=chain, timeout=timeout)
        self.validator = validator or ResponseValidator()

    @classmethod
    def from_settings(cls, settings: Optional[BirdeyeSettings] = None) -> "BirdeyeClient":
        """Build a client from BIRDEYE_* environment variables (or the given settings)."""
        settings = settings or BirdeyeSettings()
        config = settings.client_config()
        return cls(api_key=config.api_key, chain=config.default_chain, timeout=config.timeout)

    def networks(self, timeout: Optional[float] = None) -> NetworksResponse:
        """Get the list of supported networks."""
        return self._call(Endpoint.NETWORKS, {}, timeout=timeout)

    def price(
        self,
        address: str,
        chain: Optional[str] = None,
        check_liquidity: Optional[float] = None,
        include_liquidity: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> PriceResponse:
        """
        Get the latest price of a token.

        Args:
            address: Token address.
            chain: x-chain override; defaults to the client's chain.
            check_liquidity: Minimum liquidity for the price to be reported.
            include_liquidity: Ask the API to include `liquidity` in the result.
            timeout: Per-call HTTP timeout in seconds.

        Returns:
            The validated `PriceResponse`.

        Raises:
            TransportError, DecodeError, ResponseValidationError, ApiLevelFailure
        """

        params = {
            'address': address,
            'check_liquidity': check_liquidity,
            'include_liquidity': _flag(include_liquidity),
        }
        return self._call(Endpoint.PRICE, params, chain=chain, timeout=timeout)

    def token_list(
        self,
        sort_by: Union[SortBy, str] = SortBy.V24H_USD,
        sort_type: Union[SortType, str] = SortType.DESC,
        offset: int = 0,
        min_liquidity: float = 100,
        chain: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TokenListResponse:
        """
        Get a page of the token list.

        Args:
            sort_by: 'v24hUSD', 'mc' or 'v24hChangePercent'.
            sort_type: 'asc' or 'desc'.
            offset: Number of tokens to skip.
            min_liquidity: Minimum liquidity for a token to be listed.
            chain: x-chain override; defaults to the client's chain.
            timeout: Per-call HTTP timeout in seconds.

        Returns:
            The validated `TokenListResponse`.

        Raises:
            ValueError: If a parameter is invalid.
            TransportError, DecodeError, ResponseValidationError, ApiLevelFailure
        """

        # parameter validation
        sort_by = SortBy(sort_by)
        sort_type = SortType(sort_type)
        if offset < 0:
            raise ValueError("offset must be greater than or equal to 0")

        params = {
            'sort_by': sort_by.value,
            'sort_type': sort_type.value,
            'offset': offset,
            'min_liquidity': min_liquidity,
        }
        return self._call(Endpoint.TOKEN_LIST, params, chain=chain, timeout=timeout)

    def history_price(
        self,
        address: str,
        address_type: Union[AddressType, str],
        interval: Union[TimeInterval, str],
        time_from: datetime,
        time_to: datetime,
        chain: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> HistoryPriceResponse:
        """
        Get the historical price line of a token or pair (premium).

        Args:
            address: Token or pair address.
            address_type: 'token' or 'pair'.
            interval: Candle interval, sent as `type` (e.g. '15m', '1H', '1D').
            time_from: Start of the range; sent as unix seconds.
            time_to: End of the range; sent as unix seconds.
            chain: x-chain override; defaults to the client's chain.
            timeout: Per-call HTTP timeout in seconds.

        Raises:
            ValueError: If a parameter is invalid.
            TransportError, DecodeError, ResponseValidationError, ApiLevelFailure
        """

        # parameter validation
        address_type = AddressType(address_type)
        interval = TimeInterval(interval)
        if time_from > time_to:
            raise ValueError("time_from must not be later than time_to")

        params = {
            'address': address,
            'address_type': address_type.value,
            'type': interval.value,
            'time_from': _epoch_seconds(time_from),
            'time_to': _epoch_seconds(time_to),
        }
        return self._call(Endpoint.HISTORY_PRICE, params, chain=chain, timeout=timeout)

    def multi_price(
        self,
        list_address: Sequence[str],
        chain: Optional[str] = None,
        check_liquidity: Optional[float] = None,
        include_liquidity: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> MultiPriceResponse:
        """
        Get the latest prices of up to 100 tokens in one call (premium).

        `list_address` may also be a single address string.

        Raises:
            ValueError: If `list_address` is empty or longer than 100.
            TransportError, DecodeError, ResponseValidationError, ApiLevelFailure
        """

        # parameter validation
        if isinstance(list_address, str):
            list_address = [list_address] if list_address.strip() else []
        if not list_address:
            raise ValueError("list_address must contain at least one address")
        if len(list_address) > MAX_MULTI_PRICE_ADDRESSES:
            raise ValueError(f"list_address accepts at most {MAX_MULTI_PRICE_ADDRESSES} addresses")

        params = {
            'list_address': ",".join(list_address),
            'check_liquidity': check_liquidity,
            'include_liquidity': _flag(include_liquidity),
        }
        return self._call(Endpoint.MULTI_PRICE, params, chain=chain, timeout=timeout)

    def build_url(self, endpoint: Endpoint, params: Dict[str, QueryValue]) -> str:
        url = f"{self.BASE_URL}{endpoint.value}"
        query = encode_query(params)
        return f"{url}?{query}" if query else url

    def build_headers(self, chain: Optional[str] = None) -> Dict[str, str]:
        return {
            'accept': 'application/json',
            'X-API-KEY': self.config.api_key,
            'x-chain': chain or self.config.default_chain,
        }

    def _call(
        self,
        endpoint: Endpoint,
        params: Dict[str, QueryValue],
        chain: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        payload, status = self._request(endpoint, params, chain=chain, timeout=timeout)
        result: StrictSchema = self.validator.validate(endpoint, payload)

        if not result.success:
            message = getattr(result, 'message', None) or "API reported success=false"
            logger.error(f"API failure on {endpoint.value}: {message}")
            raise ApiLevelFailure(message, endpoint=endpoint, status_code=status, response=result)

        return result

    def _request(
        self,
        endpoint: Endpoint,
        params: Dict[str, QueryValue],
        chain: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[Any, int]:
        """
        Send one GET request and return the decoded JSON body with the HTTP status.
        """

        url = self.build_url(endpoint, params)
        headers = self.build_headers(chain)

        try:
            response = requests.get(
                url,
                headers=headers,
                timeout=timeout if timeout is not None else self.config.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout: {endpoint.value}")
            raise TransportError("Request timeout", url=url) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {str(e)}")
            raise TransportError(f"Request error: {str(e)}", url=url) from e

        status = response.status_code
        logger.info(f"API Response: {endpoint.value} Status {status}")

        try:
            payload = response.json()
        except ValueError as e:
            body = str(response.text)[:500]
            if not 200 <= status < 300:
                error_msg = f"API error: HTTP {status} - {body}"
                logger.error(error_msg)
                raise ApiLevelFailure(error_msg, endpoint=endpoint, status_code=status) from e
            logger.error(f"Invalid JSON body from {endpoint.value}")
            raise DecodeError(f"Invalid JSON in {endpoint.value} response: {str(e)}", status_code=status, body=body) from e

        if not 200 <= status < 300:
            message = payload.get('message') if isinstance(payload, dict) else None
            error_msg = f"API error: HTTP {status} - {message or payload}"
            logger.error(error_msg)
            raise ApiLevelFailure(error_msg, endpoint=endpoint, status_code=status)

        return payload, status
