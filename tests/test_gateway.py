"""
LimeSurveyGateway tests: session key lifecycle, envelope handling and the
positional argument order of the convenience methods.
"""

import asyncio
import gc
import json
import logging

import httpx
import pytest

from conftest import API_URL, SESSION_KEY, FakeRemoteControl, RpcFault
from limesurvey_core.errors import (
    AuthenticationError,
    ConfigurationError,
    RemoteProcedureError,
    TransportError,
)
from limesurvey_core.gateway import LimeSurveyGateway


def make_gateway(remote, username="u", password="p"):
    return LimeSurveyGateway(
        API_URL,
        username=username,
        password=password,
        transport=httpx.MockTransport(remote.handler),
    )


class TestSessionKey:
    @pytest.mark.asyncio
    async def test_first_call_authenticates_with_credentials(self, gateway, remote):
        key = await gateway.get_session_key()

        assert key == SESSION_KEY
        assert remote.calls == [("get_session_key", ["u", "p"])]

    @pytest.mark.asyncio
    async def test_key_is_cached(self, gateway, remote):
        first = await gateway.get_session_key()
        second = await gateway.get_session_key()

        assert first == second == SESSION_KEY
        assert remote.methods() == ["get_session_key"]

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_authentication(self, gateway, remote):
        keys = await asyncio.gather(*(gateway.get_session_key() for _ in range(5)))

        assert keys == [SESSION_KEY] * 5
        assert remote.methods().count("get_session_key") == 1

    @pytest.mark.asyncio
    async def test_concurrent_tool_calls_share_one_authentication(self, gateway, remote):
        remote.results["list_surveys"] = []
        await asyncio.gather(*(gateway.list_surveys() for _ in range(3)))

        assert remote.methods().count("get_session_key") == 1
        assert remote.methods().count("list_surveys") == 3

    @pytest.mark.asyncio
    async def test_missing_credentials(self, remote):
        gateway = make_gateway(remote, username=None, password="p")

        with pytest.raises(ConfigurationError):
            await gateway.get_session_key()
        assert remote.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, "", "   ", 42, {"status": "Invalid user name or password"}])
    async def test_unusable_key_is_rejected(self, remote, result):
        remote.results["get_session_key"] = result
        gateway = make_gateway(remote)

        with pytest.raises(AuthenticationError, match="empty or invalid response"):
            await gateway.get_session_key()
        assert not gateway.has_session

    @pytest.mark.asyncio
    async def test_failed_authentication_can_be_retried(self, remote):
        remote.results["get_session_key"] = ""
        gateway = make_gateway(remote)
        with pytest.raises(AuthenticationError):
            await gateway.get_session_key()

        remote.results["get_session_key"] = SESSION_KEY
        assert await gateway.get_session_key() == SESSION_KEY
        assert remote.methods().count("get_session_key") == 2


class TestRelease:
    @pytest.mark.asyncio
    async def test_release_without_key_makes_no_call(self, gateway, remote):
        assert await gateway.release_session_key() is True
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_release_clears_key_and_next_call_reauthenticates(self, gateway, remote):
        remote.results["list_surveys"] = []
        await gateway.list_surveys()

        assert await gateway.release_session_key() is True
        assert remote.params("release_session_key") == [SESSION_KEY]
        assert not gateway.has_session

        await gateway.list_surveys()
        assert remote.methods() == [
            "get_session_key",
            "list_surveys",
            "release_session_key",
            "get_session_key",
            "list_surveys",
        ]

    @pytest.mark.asyncio
    async def test_release_failure_returns_false(self, gateway, remote):
        await gateway.get_session_key()
        remote.results["release_session_key"] = RpcFault("Invalid session key")

        assert await gateway.release_session_key() is False
        assert gateway.has_session

    @pytest.mark.asyncio
    async def test_release_transport_failure_returns_false(self, gateway, remote):
        await gateway.get_session_key()
        remote.results["release_session_key"] = httpx.Response(503)

        assert await gateway.release_session_key() is False


class TestInvoke:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, [], {}, 0, "OK"])
    async def test_result_is_returned_verbatim(self, gateway, remote, result):
        remote.results["list_surveys"] = result

        assert await gateway.invoke("list_surveys", ["key"]) == result

    @pytest.mark.asyncio
    async def test_request_envelope(self, gateway, remote):
        seen = []

        def capture(body):
            seen.append(body)
            return httpx.Response(200, json={"id": body["id"], "result": [], "error": None})

        remote.results["list_surveys"] = capture
        await gateway.invoke("list_surveys", ["key", None])
        await gateway.invoke("list_surveys", ["key", None])

        assert seen[0]["method"] == "list_surveys"
        assert seen[0]["params"] == ["key", None]
        assert seen[1]["id"] > seen[0]["id"]

    @pytest.mark.asyncio
    async def test_invalid_session_key_error(self, gateway, remote):
        remote.results["list_surveys"] = RpcFault("Invalid session key")

        with pytest.raises(RemoteProcedureError) as excinfo:
            await gateway.list_surveys()

        assert excinfo.value.payload == "Invalid session key"
        assert excinfo.value.method == "list_surveys"
        assert str(excinfo.value) == "LimeSurvey API error: Invalid session key"

    @pytest.mark.asyncio
    async def test_structured_error_keeps_code(self, gateway, remote):
        remote.results["list_surveys"] = RpcFault({"code": -32601, "message": "Method not found"})

        with pytest.raises(RemoteProcedureError) as excinfo:
            await gateway.list_surveys()

        assert excinfo.value.code == -32601
        assert excinfo.value.payload["message"] == "Method not found"

    @pytest.mark.asyncio
    async def test_http_error_status_is_transport_error(self, gateway, remote):
        remote.results["list_surveys"] = httpx.Response(500, text="Internal Server Error")

        with pytest.raises(TransportError) as excinfo:
            await gateway.invoke("list_surveys", ["key"])

        assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)
        assert excinfo.value.__cause__ is excinfo.value.cause

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        gateway = LimeSurveyGateway(API_URL, "u", "p", transport=httpx.MockTransport(refuse))

        with pytest.raises(TransportError, match="Connection refused"):
            await gateway.invoke("list_surveys", ["key"])

    @pytest.mark.asyncio
    async def test_non_json_body_is_transport_error(self, gateway, remote):
        remote.results["list_surveys"] = httpx.Response(200, text="<html>login</html>")

        with pytest.raises(TransportError, match="non-JSON"):
            await gateway.invoke("list_surveys", ["key"])

    @pytest.mark.asyncio
    async def test_error_propagates_through_convenience_method(self, gateway, remote):
        remote.results["get_summary"] = RpcFault("No permission")

        with pytest.raises(RemoteProcedureError):
            await gateway.get_summary(123)


class TestArgumentOrder:
    @pytest.mark.asyncio
    async def test_optional_arguments_are_sent_as_null(self, gateway, remote):
        await gateway.list_questions(123)

        assert remote.params("list_questions") == [SESSION_KEY, 123, None, None]

    @pytest.mark.asyncio
    async def test_export_responses_order(self, gateway, remote):
        await gateway.export_responses(
            123, "csv", "en", "complete", "full", "long", 1, 9, ["id"], {"convertY": True}
        )

        assert remote.params("export_responses") == [
            SESSION_KEY, 123, "csv", "en", "complete", "full", "long", 1, 9, ["id"], {"convertY": True},
        ]

    @pytest.mark.asyncio
    async def test_export_responses_defaults(self, gateway, remote):
        await gateway.export_responses(123, "json")

        assert remote.params("export_responses") == [
            SESSION_KEY, 123, "json", None, "all", "code", "short", None, None, None, None,
        ]

    @pytest.mark.asyncio
    async def test_export_statistics_defaults(self, gateway, remote):
        await gateway.export_statistics(123)

        assert remote.params("export_statistics") == [SESSION_KEY, 123, "pdf", None, "0", None]

    @pytest.mark.asyncio
    async def test_language_properties_order(self, gateway, remote):
        await gateway.get_language_properties(123, ["surveyls_title"], "de")

        assert remote.params("get_language_properties") == [SESSION_KEY, 123, ["surveyls_title"], "de"]

    @pytest.mark.asyncio
    async def test_list_participants_defaults(self, gateway, remote):
        await gateway.list_participants(123)

        assert remote.params("list_participants") == [SESSION_KEY, 123, 0, 10, False, None, None]

    @pytest.mark.asyncio
    async def test_import_group_includes_survey(self, gateway, remote):
        await gateway.import_group(123, "QkFTRTY0", name="Demographics")

        assert remote.params("import_group") == [SESSION_KEY, 123, "QkFTRTY0", "lsg", "Demographics", None]

    @pytest.mark.asyncio
    async def test_site_setting_is_requested_by_name(self, gateway, remote):
        await gateway.get_site_settings("availablelanguages")

        assert remote.params("get_site_settings") == [SESSION_KEY, "availablelanguages"]


class TestSessionKeyScenario:
    @pytest.mark.asyncio
    async def test_returns_key_and_second_call_makes_no_request(self):
        remote = FakeRemoteControl({"get_session_key": "SESSIONKEY123"})
        gateway = make_gateway(remote, username="u", password="p")

        assert await gateway.get_session_key() == "SESSIONKEY123"
        assert await gateway.get_session_key() == "SESSIONKEY123"
        assert len(remote.calls) == 1

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, remote):
        async with make_gateway(remote) as gateway:
            await gateway.get_session_key()
        assert gateway._client.is_closed


class TestLoginInFlight:
    """The get_session_key request is held open until ``release`` is set."""

    def blocked_gateway(self, remote):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

        async def handler(request):
            if json.loads(request.content)["method"] == "get_session_key":
                self.started.set()
                await self.release.wait()
            return remote.handler(request)

        return LimeSurveyGateway(API_URL, "u", "p", transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_release_waits_for_pending_login(self, remote):
        gateway = self.blocked_gateway(remote)
        login = asyncio.ensure_future(gateway.get_session_key())
        await self.started.wait()

        releasing = asyncio.ensure_future(gateway.release_session_key())
        await asyncio.sleep(0)
        self.release.set()

        assert await releasing is True
        assert await login == SESSION_KEY
        assert not gateway.has_session
        assert remote.methods() == ["get_session_key", "release_session_key"]

    @pytest.mark.asyncio
    async def test_release_after_failed_pending_login(self, remote):
        remote.results["get_session_key"] = ""
        gateway = self.blocked_gateway(remote)
        login = asyncio.ensure_future(gateway.get_session_key())
        await self.started.wait()

        releasing = asyncio.ensure_future(gateway.release_session_key())
        await asyncio.sleep(0)
        self.release.set()

        assert await releasing is True
        with pytest.raises(AuthenticationError):
            await login
        assert remote.methods() == ["get_session_key"]

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_login(self, remote):
        gateway = self.blocked_gateway(remote)
        waiter = asyncio.ensure_future(gateway.get_session_key())
        await self.started.wait()

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        self.release.set()

        assert await gateway.get_session_key() == SESSION_KEY
        assert gateway.has_session
        assert remote.methods() == ["get_session_key"]

    @pytest.mark.asyncio
    async def test_failed_login_without_waiters_is_logged_once(self, remote, caplog):
        remote.results["get_session_key"] = ""
        gateway = self.blocked_gateway(remote)
        waiter = asyncio.ensure_future(gateway.get_session_key())
        await self.started.wait()

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        with caplog.at_level(logging.WARNING):
            pending = gateway._session.pending
            self.release.set()
            await asyncio.wait([pending])
            await asyncio.sleep(0)
            del pending
            gc.collect()

        assert caplog.text.count("LimeSurvey authentication failed") == 1
        assert "never retrieved" not in caplog.text
        assert not gateway.has_session
