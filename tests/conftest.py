"""Shared fixtures: a fake RemoteControl endpoint behind httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from limesurvey_core.gateway import LimeSurveyGateway

API_URL = "http://limesurvey.test/index.php/admin/remotecontrol"
SESSION_KEY = "SESSIONKEY123"


class RpcFault:
    """Marks a scripted result that should come back in the ``error`` field."""

    def __init__(self, payload):
        self.payload = payload


class FakeRemoteControl:
    """Scripted JSON-RPC endpoint that records every request.

    ``results`` maps a procedure name to its result, an RpcFault, an
    httpx.Response, or a callable taking the decoded request body.
    """

    def __init__(self, results=None):
        self.results = {"get_session_key": SESSION_KEY, "release_session_key": "OK"}
        self.results.update(results or {})
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append((body["method"], body["params"]))

        outcome = self.results.get(body["method"])
        if callable(outcome):
            outcome = outcome(body)
        if isinstance(outcome, httpx.Response):
            return outcome
        if isinstance(outcome, RpcFault):
            return httpx.Response(200, json={"id": body["id"], "result": None, "error": outcome.payload})
        return httpx.Response(200, json={"id": body["id"], "result": outcome, "error": None})

    def methods(self):
        return [method for method, _ in self.calls]

    def params(self, method):
        """Parameters of the last call to ``method``."""
        for name, params in reversed(self.calls):
            if name == method:
                return params
        raise AssertionError(f"{method} was never called")


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def remote():
    return FakeRemoteControl()


@pytest.fixture
def gateway(remote):
    return LimeSurveyGateway(
        API_URL,
        username="u",
        password="p",
        transport=httpx.MockTransport(remote.handler),
    )
