"""
Test Suite for Helper Functions

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest
import httpx

from datasources.helpers import fetch_json, unwrap_api_response
from datasources.exceptions import BadResponse, QueryTimeout, DataSourceUnavailable


class DummyResponse:
    def __init__(self, status_code=200, text="", json_data=None, bad_json=False):
        self.status_code = status_code
        self.text = text
        self._json = json_data or {}
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError("err", request=None, response=self)

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self._json


class DummyClient:
    def __init__(self, resp: DummyResponse):
        self.resp = resp
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def get(self, url, params=None, headers=None):
        self.calls.append((url, params, headers))
        return self.resp


@pytest.mark.asyncio
async def test_fetch_json_success(monkeypatch):
    resp = DummyResponse(status_code=200, json_data={"foo": "bar"})
    client = DummyClient(resp)
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: client)
    got = await fetch_json("url", params={"a": 1}, headers={"X-Scope-OrgID": "t"})
    assert got == {"foo": "bar"}
    assert client.calls == [("url", {"a": 1}, {"X-Scope-OrgID": "t"})]

@pytest.mark.asyncio
async def test_fetch_json_http_error(monkeypatch):
    resp = DummyResponse(status_code=404, text="not found")
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: DummyClient(resp))
    with pytest.raises(BadResponse) as ei:
        await fetch_json("url", invalid_msg="rules request failed")
    assert "[404]" in str(ei.value)

@pytest.mark.asyncio
async def test_fetch_json_timeout(monkeypatch):
    async def get(*args, **kwargs):
        raise httpx.TimeoutException("timeout")
    client = DummyClient(DummyResponse())
    client.get = get
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: client)
    with pytest.raises(QueryTimeout):
        await fetch_json("url")

@pytest.mark.asyncio
async def test_fetch_json_unreachable(monkeypatch):
    async def get(*args, **kwargs):
        raise httpx.ConnectError("refused")
    client = DummyClient(DummyResponse())
    client.get = get
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: client)
    with pytest.raises(DataSourceUnavailable) as ei:
        await fetch_json("http://thanos:9090/api/v1/rules", unavailable_msg="Cannot reach Thanos at")
    assert str(ei.value) == "Cannot reach Thanos at http://thanos:9090/api/v1/rules"

@pytest.mark.asyncio
async def test_fetch_json_invalid_body(monkeypatch):
    resp = DummyResponse(status_code=200, bad_json=True)
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: DummyClient(resp))
    with pytest.raises(BadResponse):
        await fetch_json("url")


def test_unwrap_api_response_success():
    assert unwrap_api_response({"status": "success", "data": {"groups": []}}, "rules") == {"groups": []}
    assert unwrap_api_response({"status": "success", "data": None}, "exemplars") is None


def test_unwrap_api_response_error_status():
    payload = {"status": "error", "errorType": "bad_data", "error": "invalid parameter"}
    with pytest.raises(BadResponse) as ei:
        unwrap_api_response(payload, "exemplars")
    assert "bad_data" in str(ei.value)
    assert "invalid parameter" in str(ei.value)


@pytest.mark.parametrize("payload", [[], "text", {"status": "success"}])
def test_unwrap_api_response_malformed(payload):
    with pytest.raises(BadResponse):
        unwrap_api_response(payload, "rules")
