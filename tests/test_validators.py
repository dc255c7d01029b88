"""Unit tests for ResponseValidator."""

import copy
from datetime import timezone

import pytest
from pydantic import ValidationError

from birdeye_client.constants import Endpoint, IssueKind
from birdeye_client.exceptions import ResponseValidationError
from birdeye_client.schemas import MultiPriceResponse, PriceResponse, TokenListResponse
from birdeye_client.validators import ResponseValidator, format_path


@pytest.fixture
def validator():
    """Create a validator instance."""
    return ResponseValidator()


@pytest.fixture
def price_payload():
    return {
        'success': True,
        'data': {
            'value': 150.2,
            'updateUnixTime': 1700000000,
            'updateHumanTime': 1700000000,
        },
    }


@pytest.fixture
def token_list_payload():
    return {
        'success': True,
        'data': {
            'updateUnixTime': 1700000000,
            'updateTime': '2023-11-14T22:13:20',
            'tokens': [
                {
                    'address': 'So11111111111111111111111111111111111111112',
                    'decimals': 9,
                    'lastTradeUnixTime': 1699999990,
                    'liquidity': 12345678.9,
                    'logoURI': 'https://img.example/sol.png',
                    'mc': 65000000000.5,
                    'name': 'Wrapped SOL',
                    'symbol': 'SOL',
                    'v24hChangePercent': -1.25,
                    'v24hUSD': 987654321.0,
                },
            ],
            'total': 1,
        },
    }


def _issue_at(error, path):
    return next(issue for issue in error.issues if issue['path'] == path)


class TestPriceContract:
    """Test the /defi/price contract."""

    def test_valid_price(self, validator, price_payload):
        """Test a conforming price response."""
        result = validator.validate(Endpoint.PRICE, price_payload)

        assert isinstance(result, PriceResponse)
        assert result.success is True
        assert result.data.value == 150.2
        assert result.data.updateUnixTime == 1700000000

    def test_absent_liquidity_not_set(self, validator, price_payload):
        """Test an absent optional field reads as None and is not marked as set."""
        result = validator.validate(Endpoint.PRICE, price_payload)

        assert result.data.liquidity is None
        assert 'liquidity' not in result.data.model_fields_set
        assert 'liquidity' not in result.data.model_dump(exclude_unset=True)

    def test_liquidity_present(self, validator, price_payload):
        """Test an optional field carried by the response."""
        price_payload['data']['liquidity'] = 5000.5
        result = validator.validate(Endpoint.PRICE, price_payload)
        assert result.data.liquidity == 5000.5

    def test_null_liquidity_rejected(self, validator, price_payload):
        """Test null is not accepted for an optional, non-nullable field."""
        price_payload['data']['liquidity'] = None

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert _issue_at(exc_info.value, 'data.liquidity')['kind'] == IssueKind.WRONG_TYPE

    def test_unexpected_field_rejected(self, validator):
        """Test strict rejection of undeclared fields."""
        payload = {
            'success': True,
            'data': {
                'value': 1,
                'updateUnixTime': 1700000000,
                'updateHumanTime': 1700000000,
                'extra': 'x',
            },
        }

        with pytest.raises(ResponseValidationError, match="data.extra") as exc_info:
            validator.validate(Endpoint.PRICE, payload)

        error = exc_info.value
        assert error.endpoint == Endpoint.PRICE
        assert error.paths == ['data.extra']
        assert error.issues[0]['kind'] == IssueKind.UNEXPECTED
        assert error.issues[0]['input'] == 'x'

    def test_unexpected_top_level_field(self, validator, price_payload):
        """Test 'message' is not part of the price contract."""
        price_payload['message'] = 'hello'

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert exc_info.value.paths == ['message']

    def test_missing_required_field(self, validator, price_payload):
        """Test a missing required field."""
        del price_payload['data']['value']

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        issue = _issue_at(exc_info.value, 'data.value')
        assert issue['kind'] == IssueKind.MISSING
        assert issue['message'] == 'missing required field'

    def test_numeric_string_rejected(self, validator, price_payload):
        """Test numbers sent as strings are not coerced."""
        price_payload['data']['value'] = '150.2'

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert _issue_at(exc_info.value, 'data.value')['kind'] == IssueKind.WRONG_TYPE

    def test_boolean_as_number_rejected(self, validator, price_payload):
        """Test booleans are not accepted as numbers."""
        price_payload['data']['value'] = True

        with pytest.raises(ResponseValidationError):
            validator.validate(Endpoint.PRICE, price_payload)

    def test_success_must_be_boolean(self, validator, price_payload):
        """Test 'success' is not coerced from strings or ints."""
        price_payload['success'] = 'true'

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert exc_info.value.paths == ['success']

    def test_epoch_datetime_round_trips(self, validator, price_payload):
        """Test epoch seconds coerce to an aware datetime with the same timestamp."""
        result = validator.validate(Endpoint.PRICE, price_payload)
        human_time = result.data.updateHumanTime

        assert human_time.tzinfo is not None
        assert human_time.timestamp() == 1700000000

    def test_iso_datetime_read_as_utc(self, validator, price_payload):
        """Test a naive ISO string is taken as UTC."""
        price_payload['data']['updateHumanTime'] = '2023-11-14T22:13:20'
        result = validator.validate(Endpoint.PRICE, price_payload)

        assert result.data.updateHumanTime.tzinfo == timezone.utc
        assert result.data.updateHumanTime.timestamp() == 1700000000

    def test_fractional_epoch_round_trips(self, validator, price_payload):
        """Test sub-second epochs keep their precision."""
        price_payload['data']['updateHumanTime'] = 1700000000.5
        result = validator.validate(Endpoint.PRICE, price_payload)

        assert result.data.updateHumanTime.timestamp() == 1700000000.5
        assert result.data.updateHumanTime.microsecond == 500000

    def test_large_epoch_read_as_seconds(self, validator, price_payload):
        """Test large numeric values are never reinterpreted as milliseconds."""
        price_payload['data']['updateHumanTime'] = 25000000000
        result = validator.validate(Endpoint.PRICE, price_payload)

        assert result.data.updateHumanTime.year == 2762
        assert result.data.updateHumanTime.timestamp() == 25000000000

    def test_out_of_range_epoch(self, validator, price_payload):
        """Test an epoch beyond the datetime range is a coercion failure."""
        price_payload['data']['updateHumanTime'] = 1e20

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert _issue_at(exc_info.value, 'data.updateHumanTime')['kind'] == IssueKind.COERCION

    def test_unparseable_datetime(self, validator, price_payload):
        """Test a failed datetime coercion is reported as such."""
        price_payload['data']['updateHumanTime'] = 'not a date'

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, price_payload)

        assert _issue_at(exc_info.value, 'data.updateHumanTime')['kind'] == IssueKind.COERCION

    def test_non_object_payload(self, validator):
        """Test a payload that is not an object at all."""
        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.PRICE, ['not', 'an', 'object'])

        assert exc_info.value.paths == ['<root>']
        assert exc_info.value.issues[0]['kind'] == IssueKind.WRONG_TYPE

    def test_record_is_frozen(self, validator, price_payload):
        """Test validated records cannot be modified."""
        result = validator.validate(Endpoint.PRICE, price_payload)

        with pytest.raises(ValidationError):
            result.data.value = 1.0


class TestTokenListContract:
    """Test the /defi/tokenlist contract."""

    def test_valid_token_list(self, validator, token_list_payload):
        """Test a conforming token list."""
        result = validator.validate(Endpoint.TOKEN_LIST, token_list_payload)

        assert isinstance(result, TokenListResponse)
        assert result.data.total == 1
        assert result.data.tokens[0].symbol == 'SOL'
        assert result.data.tokens[0].decimals == 9
        assert result.message is None

    def test_nullable_fields_accept_null(self, validator, token_list_payload):
        """Test nullable fields accept explicit null."""
        token = token_list_payload['data']['tokens'][0]
        token['name'] = None
        token['symbol'] = None
        token['v24hChangePercent'] = None

        result = validator.validate(Endpoint.TOKEN_LIST, token_list_payload)

        assert result.data.tokens[0].name is None
        assert result.data.tokens[0].symbol is None

    def test_nullable_field_absent_rejected(self, validator, token_list_payload):
        """Test nullable fields must still be present."""
        del token_list_payload['data']['tokens'][0]['name']

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.TOKEN_LIST, token_list_payload)

        assert exc_info.value.paths == ['data.tokens[0].name']
        assert exc_info.value.issues[0]['kind'] == IssueKind.MISSING

    def test_liquidity_optional(self, validator, token_list_payload):
        """Test token liquidity may be absent."""
        del token_list_payload['data']['tokens'][0]['liquidity']
        result = validator.validate(Endpoint.TOKEN_LIST, token_list_payload)
        assert 'liquidity' not in result.data.tokens[0].model_fields_set

    def test_integer_accepted_for_number(self, validator, token_list_payload):
        """Test integral JSON numbers are valid for float fields."""
        token_list_payload['data']['tokens'][0]['mc'] = 65000000000
        result = validator.validate(Endpoint.TOKEN_LIST, token_list_payload)
        assert result.data.tokens[0].mc == 65000000000

    def test_message_optional(self, validator, token_list_payload):
        """Test the optional top-level message."""
        token_list_payload['message'] = 'Success'
        result = validator.validate(Endpoint.TOKEN_LIST, token_list_payload)
        assert result.message == 'Success'

    def test_multiple_issues_reported(self, validator, token_list_payload):
        """Test every violation is collected, with list indexes in the path."""
        second = copy.deepcopy(token_list_payload['data']['tokens'][0])
        second['decimals'] = 'nine'
        second['unknown'] = 1
        token_list_payload['data']['tokens'].append(second)
        del token_list_payload['data']['total']

        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.TOKEN_LIST, token_list_payload)

        error = exc_info.value
        assert set(error.paths) == {
            'data.tokens[1].decimals',
            'data.tokens[1].unknown',
            'data.total',
        }

        report = error.report()
        assert report['endpoint'] == '/defi/tokenlist'
        assert report['error_count'] == 3
        assert report['counts'] == {'wrong_type': 1, 'unexpected': 1, 'missing': 1}


class TestOtherContracts:
    """Test networks, history price and multi price contracts."""

    def test_networks(self, validator):
        result = validator.validate(Endpoint.NETWORKS, {'success': True, 'data': ['solana', 'ethereum']})
        assert result.data == ['solana', 'ethereum']

    def test_networks_non_string_entry(self, validator):
        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.NETWORKS, {'success': True, 'data': ['solana', 1]})
        assert exc_info.value.paths == ['data[1]']

    def test_history_price(self, validator):
        payload = {
            'success': True,
            'data': {'items': [
                {'unixTime': 1700000000, 'value': 55.1},
                {'unixTime': 1700000900, 'value': 55.3},
            ]},
        }
        result = validator.validate(Endpoint.HISTORY_PRICE, payload)
        assert [item.unixTime for item in result.data.items] == [1700000000, 1700000900]

    def test_history_price_extra_item_field(self, validator):
        payload = {
            'success': True,
            'data': {'items': [{'unixTime': 1700000000, 'value': 55.1, 'address': 'x'}]},
        }
        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.HISTORY_PRICE, payload)
        assert exc_info.value.paths == ['data.items[0].address']

    def test_multi_price(self, validator):
        payload = {
            'success': True,
            'data': [
                {'value': 1.0, 'updateUnixTime': 1700000000, 'updateHumanTime': 1700000000},
                {'value': 2.0, 'updateUnixTime': 1700000000, 'updateHumanTime': 1700000000, 'liquidity': 10.0},
            ],
        }
        result = validator.validate(Endpoint.MULTI_PRICE, payload)
        assert isinstance(result, MultiPriceResponse)
        assert len(result.data) == 2

    def test_multi_price_failure_without_data_validates(self, validator):
        """Test an API-level failure is still a valid multi price response."""
        result = validator.validate(Endpoint.MULTI_PRICE, {'success': False, 'message': 'rate limited'})

        assert result.success is False
        assert result.message == 'rate limited'
        assert result.data is None

    def test_multi_price_null_data_rejected(self, validator):
        with pytest.raises(ResponseValidationError) as exc_info:
            validator.validate(Endpoint.MULTI_PRICE, {'success': True, 'data': None})
        assert exc_info.value.paths == ['data']


class TestFormatPath:
    """Test format_path."""

    @pytest.mark.parametrize("loc, expected", [
        (('data', 'extra'), 'data.extra'),
        (('data', 'tokens', 0, 'name'), 'data.tokens[0].name'),
        (('data', 1), 'data[1]'),
        ((), '<root>'),
    ])
    def test_format_path(self, loc, expected):
        assert format_path(loc) == expected
