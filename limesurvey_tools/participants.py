# =============================================================================
# limesurvey_tools/participants.py  —  Survey participants (token table)
# =============================================================================
#
# TOOLS:
#   list_participants           paged listing, optional attribute columns
#   get_participant_properties  one participant, looked up by token ID
#   add_participant             (mutating) one participant, token generated
#   delete_participants         (mutating, irreversible) needs confirmation
#
# A survey only has participants once its participant table is activated;
# LimeSurvey answers with a status object otherwise, which is passed through.
# =============================================================================

from typing import Annotated, Any, Optional

from pydantic import Field

from limesurvey_core.models import Participant
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import ConfirmDeletion, SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool

AttributeNames = Annotated[
    Optional[list[str]], Field(description="Optional: Array of attribute names to include")
]


class ParticipantTools(ToolGroup):

    @tool("list_participants", "Lists participants for a specific survey")
    async def list_participants(
        self,
        survey_id: SurveyId,
        start: Annotated[int, Field(description="Starting participant index")] = 0,
        limit: Annotated[int, Field(description="Number of participants to return")] = 10,
        unused: Annotated[bool, Field(description="Only show unused tokens")] = False,
        attributes: AttributeNames = None,
        conditions: Annotated[
            Optional[dict[str, Any]],
            Field(description="Optional: Field/value pairs the participants must match"),
        ] = None,
    ) -> ToolResponse:
        """List a page of participants from the survey's participant table.

        Args:
            survey_id: Survey whose participants to list.
            start: Index of the first participant returned.
            limit: Page size.
            unused: Only participants whose token has not been used yet.
            attributes: Extra columns to include (e.g. "attribute_1").
            conditions: Column/value filters, e.g. {"email": "ana@example.com"}.

        Returns:
            Summary line plus the participant rows as JSON.
        """
        try:
            participants = await self.gateway.list_participants(
                survey_id,
                start,
                limit,
                unused,
                blank_to_none(attributes),
                blank_to_none(conditions),
            )
        except Exception as exc:
            return ToolResponse.failure("Error listing participants", exc)
        return ToolResponse.ok(
            f"Participants for survey {survey_id} retrieved successfully", participants
        )

    @tool("get_participant_properties", "Gets properties of a specific participant/token")
    async def get_participant_properties(
        self,
        survey_id: SurveyId,
        token_id: Annotated[str, Field(description="The token ID")],
        attributes: AttributeNames = None,
    ) -> ToolResponse:
        query = {"tid": token_id}
        try:
            properties = await self.gateway.get_participant_properties(
                survey_id, query, blank_to_none(attributes)
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving participant properties", exc)
        return ToolResponse.ok(
            f"Properties for participant token {token_id} retrieved successfully", properties
        )

    @tool("add_participant", "Adds a participant to a survey", read_only=False)
    async def add_participant(
        self,
        survey_id: SurveyId,
        email: Annotated[str, Field(description="Participant email address")],
        first_name: Annotated[Optional[str], Field(description="Optional: First name")] = None,
        last_name: Annotated[Optional[str], Field(description="Optional: Last name")] = None,
        language: Annotated[Optional[str], Field(description="Optional: Language code")] = None,
        uses_left: Annotated[
            int, Field(description="Number of times the participant can access the survey")
        ] = 1,
        valid_from: Annotated[
            Optional[str], Field(description="Optional: Valid from date (YYYY-MM-DD HH:mm:ss)")
        ] = None,
        valid_until: Annotated[
            Optional[str], Field(description="Optional: Valid until date (YYYY-MM-DD HH:mm:ss)")
        ] = None,
        create_token: Annotated[
            bool, Field(description="Whether LimeSurvey should generate an access token")
        ] = True,
    ) -> ToolResponse:
        """Add one participant; unset optional fields are left to LimeSurvey's defaults."""
        participant = Participant(
            email=email,
            firstname=blank_to_none(first_name),
            lastname=blank_to_none(last_name),
            language=blank_to_none(language),
            usesleft=uses_left,
            validfrom=blank_to_none(valid_from),
            validuntil=blank_to_none(valid_until),
        )
        try:
            result = await self.gateway.add_participants(
                survey_id, [participant.to_params()], create_token
            )
        except Exception as exc:
            return ToolResponse.failure("Error adding participant", exc)
        return ToolResponse.ok(f"Participant added to survey ID {survey_id} successfully", result)

    @tool(
        "delete_participants",
        "Deletes participants (tokens) from a survey",
        read_only=False,
        destructive=True,
    )
    async def delete_participants(
        self,
        survey_id: SurveyId,
        token_ids: Annotated[list[str], Field(description="IDs of the tokens to delete")],
        confirm_deletion: ConfirmDeletion = False,
    ) -> ToolResponse:
        """Delete participants by token ID.

        Nothing is sent to LimeSurvey unless ``confirm_deletion`` is True.
        """
        if confirm_deletion is not True:
            return ToolResponse.error("You must confirm deletion by setting confirm_deletion to true")
        try:
            result = await self.gateway.delete_participants(survey_id, token_ids)
        except Exception as exc:
            return ToolResponse.failure("Error deleting participants", exc)
        return ToolResponse.ok(
            f"Deleted {len(token_ids)} participant(s) from survey {survey_id}", result
        )
