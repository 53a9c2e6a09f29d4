"""
Pytest fixtures for fund flow tests. Nothing here touches the network.
"""

from __future__ import annotations

import json
import threading

import pytest
import requests

from eth_fund_flow.config import Config
from eth_fund_flow.models import InternalTransaction, NormalTransaction, TokenTransfer

ONE_ETH = "1000000000000000000"
HALF_ETH = "500000000000000000"


def normal_tx(frm, to, value=ONE_ETH, hash="0xh", ts="1690000000", is_error="0"):
    return NormalTransaction(from_address=frm, to_address=to, value=value, hash=hash,
                             timestamp=ts, is_error=is_error)


def internal_tx(frm, to, value=ONE_ETH, hash="0xi", ts="1690000000", is_error="0"):
    return InternalTransaction(from_address=frm, to_address=to, value=value, hash=hash,
                               timestamp=ts, is_error=is_error)


def token_transfer(frm, to, value=ONE_ETH, hash="0xt", ts="1690000000"):
    return TokenTransfer(from_address=frm, to_address=to, value=value, hash=hash,
                         timestamp=ts, token_name="Tether USD", token_symbol="USDT",
                         token_decimal="6")


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Replays queued responses or exceptions and records every call."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClient:
    """Stands in for EtherscanClient; each source is a list or an exception."""

    def __init__(self, normal=(), internal=(), tokens=()):
        self.sources = {"normal": normal, "internal": internal, "tokens": tokens}
        self.cancel_events = []
        self.addresses = []
        self.lock = threading.Lock()

    def _serve(self, name, address, cancel_event):
        with self.lock:
            self.addresses.append(address)
            self.cancel_events.append(cancel_event)
        source = self.sources[name]
        if isinstance(source, Exception):
            raise source
        if callable(source):
            return source(cancel_event)
        return list(source)

    def get_normal_transactions(self, address, cancel_event=None):
        return self._serve("normal", address, cancel_event)

    def get_internal_transactions(self, address, cancel_event=None):
        return self._serve("internal", address, cancel_event)

    def get_token_transfers(self, address, cancel_event=None):
        return self._serve("tokens", address, cancel_event)


@pytest.fixture
def config():
    return Config(etherscan_api_key="test-key", retry_backoff=0.0)
