# =============================================================================
# limesurvey_core/gateway.py  —  The RemoteControl JSON-RPC gateway
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   LimeSurveyGateway is the single authenticated channel to LimeSurvey's
#   RemoteControl 2 API.  Every tool in limesurvey_tools/ goes through it.
#
# HOW A CALL FLOWS:
#   1. A convenience method (list_surveys, export_responses, ...) asks for
#      the session key via get_session_key().
#   2. The first time, get_session_key() calls the "get_session_key"
#      procedure with the configured username/password and caches the key.
#      Concurrent first callers share one in-flight authentication task.
#   3. The convenience method calls invoke(procedure, [key, ...args]) with
#      the arguments in the exact order the RemoteControl API expects.
#      Optional arguments without a value are sent as null in their slot.
#   4. invoke() POSTs {"method", "params", "id"} and unwraps the envelope:
#        - HTTP/network failure      -> TransportError
#        - truthy "error" field      -> RemoteProcedureError (payload kept)
#        - otherwise                 -> "result", verbatim (None included)
#
# WHAT THE GATEWAY DOES NOT DO:
#   - No retries, no caching of results, no batching.
#   - No decoding of results.  Base64 exports and JSON-string settings are
#     decoded by the caller (see limesurvey_core/formatting.py).
#
# SESSION LIFECYCLE:
#   The key lives until release_session_key() succeeds or the process
#   exits.  Release is best-effort: it returns False instead of raising.
# =============================================================================

import asyncio
import contextlib
import itertools
import logging
from typing import Any, Optional, Sequence, Union

import httpx

from limesurvey_core.config import Settings
from limesurvey_core.errors import (
    AuthenticationError,
    ConfigurationError,
    LimeSurveyError,
    RemoteProcedureError,
    TransportError,
)
from limesurvey_core.models import (
    CompletionStatus,
    HeadingType,
    ResponseStatus,
    ResponseType,
    RpcRequest,
    RpcResponse,
    RpcValue,
    SessionKeyState,
    StatisticsFormat,
)

logger = logging.getLogger(__name__)

SurveyId = Union[int, str]


def _retrieve_outcome(task: "asyncio.Task[str]") -> None:
    # The login may outlive every waiter; its outcome is read here.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("LimeSurvey authentication failed: %s", exc)


class LimeSurveyGateway:
    """Authenticated JSON-RPC client for one LimeSurvey installation."""

    def __init__(
        self,
        api_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.username = username
        self.password = password
        self._session = SessionKeyState()
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "LimeSurveyGateway":
        return cls(
            api_url=settings.api_url,
            username=settings.username,
            password=settings.password,
            timeout=settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LimeSurveyGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def has_session(self) -> bool:
        return self._session.key is not None

    # =========================================================================
    # Core operations
    # =========================================================================
    async def invoke(self, method: str, params: Sequence[RpcValue] = ()) -> Any:
        """Call one RemoteControl procedure and return its ``result``.

        Args:
            method: Procedure name, e.g. "list_surveys".
            params: Positional arguments; the session key first for every
                procedure except get_session_key.

        Raises:
            TransportError: the request failed or the body is not a JSON object.
            RemoteProcedureError: the envelope carries an error.
        """
        request = RpcRequest(method=method, params=list(params), id=next(self._ids))
        logger.debug("-> %s (id=%s)", method, request.id)

        try:
            response = await self._client.post(self.api_url, json=request.to_payload())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            reason = str(exc) or type(exc).__name__
            logger.error("LimeSurvey request %s failed: %s", method, reason)
            raise TransportError(
                f"LimeSurvey request '{method}' failed: {reason}", cause=exc
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                f"LimeSurvey returned a non-JSON body for '{method}'", cause=exc
            ) from exc
        if not isinstance(payload, dict):
            raise TransportError(
                f"LimeSurvey returned an unexpected body for '{method}': {type(payload).__name__}"
            )

        envelope = RpcResponse.from_payload(payload)
        if envelope.is_error:
            logger.warning("LimeSurvey procedure %s returned an error: %s", method, envelope.error)
            raise RemoteProcedureError(envelope.error, method=method)
        return envelope.result

    async def get_session_key(self) -> str:
        """Return the cached session key, authenticating on first use.

        Callers arriving while an authentication is in flight await that
        same request instead of starting their own.

        Raises:
            ConfigurationError: username or password is not configured.
            AuthenticationError: LimeSurvey returned no usable key.
        """
        if self._session.key is not None:
            return self._session.key

        if self._session.pending is None:
            if not self.username or not self.password:
                raise ConfigurationError(
                    "LimeSurvey credentials not found: set LIMESURVEY_USERNAME and LIMESURVEY_PASSWORD"
                )
            self._session.pending = asyncio.ensure_future(self._authenticate())
            self._session.pending.add_done_callback(_retrieve_outcome)

        # shield: a cancelled caller must not cancel the shared request
        return await asyncio.shield(self._session.pending)

    async def _authenticate(self) -> str:
        try:
            key = await self.invoke("get_session_key", [self.username, self.password])
            if not isinstance(key, str) or not key.strip():
                raise AuthenticationError(
                    "Failed to get session key: empty or invalid response from LimeSurvey API"
                )
            self._session.key = key
            logger.info("Obtained LimeSurvey session key")
            return key
        finally:
            self._session.pending = None

    async def release_session_key(self) -> bool:
        """Release the cached session key.

        Returns:
            True when there was nothing to release or the release succeeded;
            False when LimeSurvey could not be told (the key stays cached).
        """
        # A login still in flight would cache a key after this returns.
        pending = self._session.pending
        if pending is not None:
            with contextlib.suppress(LimeSurveyError):
                await asyncio.shield(pending)

        key = self._session.key
        if key is None:
            return True

        try:
            await self.invoke("release_session_key", [key])
        except LimeSurveyError as exc:
            logger.warning("Failed to release LimeSurvey session key: %s", exc)
            return False

        self._session.clear()
        logger.info("Released LimeSurvey session key")
        return True

    async def _call(self, method: str, *args: RpcValue) -> Any:
        key = await self.get_session_key()
        return await self.invoke(method, [key, *args])

    # =========================================================================
    # Surveys
    # =========================================================================
    async def list_surveys(self, username: Optional[str] = None) -> Any:
        return await self._call("list_surveys", username)

    async def get_survey_properties(
        self, survey_id: SurveyId, settings: Optional[list[str]] = None
    ) -> Any:
        return await self._call("get_survey_properties", survey_id, settings)

    async def get_language_properties(
        self,
        survey_id: SurveyId,
        settings: Optional[list[str]] = None,
        language: Optional[str] = None,
    ) -> Any:
        return await self._call("get_language_properties", survey_id, settings, language)

    async def activate_survey(self, survey_id: SurveyId) -> Any:
        return await self._call("activate_survey", survey_id)

    async def import_survey(
        self,
        data: str,
        data_type: str = "lss",
        new_name: Optional[str] = None,
        destination_id: Optional[int] = None,
    ) -> Any:
        return await self._call("import_survey", data, data_type, new_name, destination_id)

    async def export_survey(self, survey_id: SurveyId) -> Any:
        return await self._call("export_survey", survey_id)

    async def copy_survey(self, survey_id: SurveyId, new_name: Optional[str] = None) -> Any:
        return await self._call("copy_survey", survey_id, new_name)

    async def delete_survey(self, survey_id: SurveyId) -> Any:
        return await self._call("delete_survey", survey_id)

    async def get_questionnaire_definition(
        self,
        survey_id: SurveyId,
        language: Optional[str] = None,
        include_tokens: bool = False,
    ) -> Any:
        return await self._call("get_questionnaire_definition", survey_id, language, include_tokens)

    async def list_quotas(self, survey_id: SurveyId) -> Any:
        return await self._call("list_quotas", survey_id)

    async def get_quota_properties(
        self,
        quota_id: Union[int, str],
        settings: Optional[list[str]] = None,
        language: Optional[str] = None,
    ) -> Any:
        return await self._call("get_quota_properties", quota_id, settings, language)

    # =========================================================================
    # Site and users
    # =========================================================================
    async def get_site_settings(self, setting_name: str) -> Any:
        """Return one global setting.

        Some settings (``availablelanguages``) come back as a JSON-encoded
        string; decoding is left to the caller.
        """
        return await self._call("get_site_settings", setting_name)

    async def list_users(
        self, user_id: Optional[int] = None, username: Optional[str] = None
    ) -> Any:
        return await self._call("list_users", user_id, username)

    # =========================================================================
    # Questions and groups
    # =========================================================================
    async def list_questions(
        self,
        survey_id: SurveyId,
        group_id: Optional[Union[int, str]] = None,
        language: Optional[str] = None,
    ) -> Any:
        return await self._call("list_questions", survey_id, group_id, language)

    async def get_question_properties(
        self,
        question_id: Union[int, str],
        settings: Optional[list[str]] = None,
        language: Optional[str] = None,
    ) -> Any:
        return await self._call("get_question_properties", question_id, settings, language)

    async def list_groups(self, survey_id: SurveyId, language: Optional[str] = None) -> Any:
        return await self._call("list_groups", survey_id, language)

    async def import_group(
        self,
        survey_id: SurveyId,
        data: str,
        data_type: str = "lsg",
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Any:
        return await self._call("import_group", survey_id, data, data_type, name, description)

    async def export_group(self, survey_id: SurveyId, group_id: Union[int, str]) -> Any:
        return await self._call("export_group", survey_id, group_id)

    # =========================================================================
    # Responses
    # =========================================================================
    async def get_summary(self, survey_id: SurveyId, stat_name: str = "all") -> Any:
        return await self._call("get_summary", survey_id, stat_name)

    async def export_responses(
        self,
        survey_id: SurveyId,
        document_type: str,
        language: Optional[str] = None,
        completion_status: CompletionStatus = "all",
        heading_type: HeadingType = "code",
        response_type: ResponseType = "short",
        from_response_id: Optional[int] = None,
        to_response_id: Optional[int] = None,
        fields: Optional[list[str]] = None,
        additional_options: Optional[dict] = None,
    ) -> Any:
        """Export responses; the result is a base64-encoded document."""
        return await self._call(
            "export_responses",
            survey_id,
            document_type,
            language,
            completion_status,
            heading_type,
            response_type,
            from_response_id,
            to_response_id,
            fields,
            additional_options,
        )

    async def export_statistics(
        self,
        survey_id: SurveyId,
        document_type: StatisticsFormat = "pdf",
        language: Optional[str] = None,
        graph: str = "0",
        group_ids: Optional[Union[int, list[int]]] = None,
    ) -> Any:
        """Export statistics; the result is a base64-encoded document.

        ``graph`` is the string "1" or "0", as the API expects.
        """
        return await self._call(
            "export_statistics", survey_id, document_type, language, graph, group_ids
        )

    async def add_response(self, survey_id: SurveyId, data: dict) -> Any:
        return await self._call("add_response", survey_id, data)

    async def update_response(self, survey_id: SurveyId, data: dict) -> Any:
        """Update a response; ``data`` must carry the response ``id``."""
        return await self._call("update_response", survey_id, data)

    async def delete_response(self, survey_id: SurveyId, response_id: Union[int, str]) -> Any:
        return await self._call("delete_response", survey_id, response_id)

    async def delete_all_responses(self, survey_id: SurveyId) -> Any:
        return await self._call("delete_all_responses", survey_id)

    async def reset_survey_responses(self, survey_id: SurveyId) -> Any:
        return await self._call("reset_survey_responses", survey_id)

    async def set_response_status(
        self, survey_id: SurveyId, response_id: Union[int, str], status: ResponseStatus
    ) -> Any:
        return await self._call("set_response_status", survey_id, response_id, status)

    async def import_responses(
        self,
        survey_id: SurveyId,
        data: str,
        data_type: str = "csv",
        full_response: bool = False,
    ) -> Any:
        return await self._call("import_responses", survey_id, data, data_type, full_response)

    # =========================================================================
    # Participants
    # =========================================================================
    async def list_participants(
        self,
        survey_id: SurveyId,
        start: int = 0,
        limit: int = 10,
        unused: bool = False,
        attributes: Optional[list[str]] = None,
        conditions: Optional[dict] = None,
    ) -> Any:
        return await self._call(
            "list_participants", survey_id, start, limit, unused, attributes, conditions
        )

    async def get_participant_properties(
        self,
        survey_id: SurveyId,
        token_query: Union[int, str, dict],
        settings: Optional[list[str]] = None,
    ) -> Any:
        return await self._call("get_participant_properties", survey_id, token_query, settings)

    async def add_participants(
        self,
        survey_id: SurveyId,
        participants: list[dict],
        create_token: bool = True,
    ) -> Any:
        return await self._call("add_participants", survey_id, participants, create_token)

    async def delete_participants(self, survey_id: SurveyId, token_ids: list[Union[int, str]]) -> Any:
        return await self._call("delete_participants", survey_id, token_ids)

    # =========================================================================
    # Files
    # =========================================================================
    async def upload_file(
        self, survey_id: SurveyId, field_name: str, file_name: str, content: str
    ) -> Any:
        """Upload a base64-encoded file for a file-upload question."""
        return await self._call("upload_file", survey_id, field_name, file_name, content)

    async def get_uploaded_files(
        self,
        survey_id: SurveyId,
        token: Optional[str] = None,
        response_id: Optional[int] = None,
    ) -> Any:
        return await self._call("get_uploaded_files", survey_id, token, response_id)
