"""Unit tests for utils.telegram."""

import requests
from leverage_dca.utils import telegram


class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


def test_not_configured_skips():
    assert telegram.send_telegram("hello") is False


def test_send_ok_and_truncates(monkeypatch):
    sent = {}

    def fake_post(url, json, timeout):
        sent["json"] = json
        return FakeResponse(200)

    monkeypatch.setattr(telegram.requests, "post", fake_post)
    assert telegram.send_telegram("x" * 5000, "token", "chat") is True
    assert len(sent["json"]["text"]) == telegram.MAX_MESSAGE_LEN


def test_send_failure_returns_false(monkeypatch):
    monkeypatch.setattr(telegram.requests, "post", lambda url, json, timeout: FakeResponse(400, "bad"))
    assert telegram.send_telegram("hi", "token", "chat") is False

    def boom(url, json, timeout):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(telegram.requests, "post", boom)
    assert telegram.send_telegram("hi", "token", "chat") is False
