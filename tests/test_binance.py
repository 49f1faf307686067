"""Unit tests for data.binance (no network: the python-binance client is faked)."""

import json

import pandas as pd
import pytest
from binance.exceptions import BinanceAPIException

import leverage_dca.data.binance as binance_data
from leverage_dca.data.binance import BinanceKlineSource, download_csv, klines_to_frame
from leverage_dca.data.loader import load_candles_csv

RAW = [
    [1649980800000, "100.0", "101.0", "99.0", "100.5", "10", 1649984399999, "0", 5, "0", "0", "0"],
    [1649984400000, "100.5", "102.0", "100.0", "101.5", "12", 1649987999999, "0", 6, "0", "0", "0"],
]


class FakeClient:
    def __init__(self):
        self.calls = []

    def get_historical_klines(self, symbol, interval, start, end=None):
        self.calls.append((symbol, interval, start, end))
        return RAW


class FlakyClient(FakeClient):
    """Answers with the given HTTP statuses before returning klines."""

    def __init__(self, statuses):
        super().__init__()
        self.statuses = list(statuses)

    def get_historical_klines(self, symbol, interval, start, end=None):
        if self.statuses:
            self.calls.append((symbol, interval, start, end))
            status = self.statuses.pop(0)
            raise BinanceAPIException(None, status, json.dumps({"code": -1003, "msg": "Too many requests"}))
        return super().get_historical_klines(symbol, interval, start, end)


def test_klines_to_frame():
    df = klines_to_frame(RAW)
    assert list(df.columns) == ["timestamp", "open", "high", "low", "close"]
    assert df["timestamp"].iloc[1] == 1649984400000
    assert df["close"].iloc[0] == pytest.approx(100.5)


def test_download_csv_roundtrips_through_loader(tmp_path):
    client = FakeClient()
    source = BinanceKlineSource(client=client)
    path = tmp_path / "data" / "btc.csv"
    n = download_csv(source, "BTCUSDT", "1h", "2022-04-15", path)
    assert n == 2
    assert client.calls == [("BTCUSDT", "1h", "2022-04-15", None)]
    assert path.read_text(encoding="utf-8").splitlines()[0] == "Timestamp,Open,High,Low,Close"
    df = load_candles_csv(path)
    pd.testing.assert_frame_equal(df, klines_to_frame(RAW))


def test_rate_limited_request_is_retried(monkeypatch):
    sleeps = []
    monkeypatch.setattr(binance_data.time, "sleep", sleeps.append)
    client = FlakyClient([429, 418])
    df = BinanceKlineSource(client=client).get_historical_klines("BTCUSDT", "1h", "2022-04-15")
    assert len(df) == 2
    assert len(client.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_rate_limit_gives_up_after_max_retries(monkeypatch):
    monkeypatch.setattr(binance_data.time, "sleep", lambda s: None)
    client = FlakyClient([429, 429, 429])
    with pytest.raises(BinanceAPIException) as exc:
        BinanceKlineSource(client=client).get_historical_klines("BTCUSDT", "1h", "2022-04-15")
    assert exc.value.status_code == 429
    assert len(client.calls) == 3


def test_other_api_errors_are_not_retried(monkeypatch):
    sleeps = []
    monkeypatch.setattr(binance_data.time, "sleep", sleeps.append)
    client = FlakyClient([400])
    with pytest.raises(BinanceAPIException):
        BinanceKlineSource(client=client).get_historical_klines("BTCUSDT", "1h", "2022-04-15")
    assert sleeps == []
    assert len(client.calls) == 1
