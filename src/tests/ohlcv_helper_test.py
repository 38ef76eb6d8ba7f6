import math

import pytest

from src.core.models import Candle
from src.helpers.ohlcv_helper import to_candles


def test_full_rows():
    ts = 1_700_000_000_000
    assert to_candles([[ts, 1, 2, 3, 4, 5]]) == [
        Candle(timestamp=ts, open=1, high=2, low=3, close=4, volume=5)
    ]


def test_missing_fields_default_to_zero():
    out = to_candles([[1690000000000]])
    assert out == [Candle(timestamp=1690000000000, open=0, high=0, low=0, close=0, volume=0)]


def test_none_entries_default_to_zero():
    out = to_candles([[1690000000000, 10.5, None, 9, 10, None]])
    assert out[0].high == 0
    assert out[0].volume == 0
    assert out[0].open == 10.5


def test_timestamp_truncates_toward_zero():
    assert to_candles([[1690000000000.9]])[0].timestamp == 1690000000000
    assert to_candles([[-1.7]])[0].timestamp == -1
    assert isinstance(to_candles([[5.9]])[0].timestamp, int)


def test_order_and_length_preserved():
    rows = [[3, 1], [1, 2], [2, 3]]
    assert [c.timestamp for c in to_candles(rows)] == [3, 1, 2]


def test_empty_and_none_input():
    assert to_candles([]) == []
    assert to_candles(None) == []


@pytest.mark.parametrize("ts", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_timestamp_raises(ts):
    with pytest.raises((ValueError, OverflowError)):
        to_candles([[ts, 1, 2, 3, 4, 5]])


def test_non_finite_prices_pass_through():
    out = to_candles([[1, float("nan"), float("inf"), 0, 0, 0]])
    assert math.isnan(out[0].open)
    assert out[0].high == float("inf")
