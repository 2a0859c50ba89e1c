# =============================================================================
# limesurvey_tools/questions.py  —  Questions and question groups
# =============================================================================
#
# Read-only listing tools.  Every one accepts an optional language; when it
# is omitted LimeSurvey answers in the survey's base language.
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class QuestionTools(ToolGroup):

    @tool("list_questions", "Lists all questions for a specific survey")
    async def list_questions(
        self,
        survey_id: SurveyId,
        group_id: Annotated[
            Optional[str], Field(description="Optional: Get only questions from this group")
        ] = None,
        language: Annotated[
            Optional[str], Field(description="Optional: Language for question texts")
        ] = None,
    ) -> ToolResponse:
        """List the questions of a survey, or of one of its groups.

        Args:
            survey_id: Survey whose questions to list.
            group_id: Only questions of this group; empty means all groups.
            language: Language of the question texts.

        Returns:
            Summary line plus the question rows as JSON.
        """
        try:
            questions = await self.gateway.list_questions(
                survey_id, blank_to_none(group_id), blank_to_none(language)
            )
        except Exception as exc:
            return ToolResponse.failure("Error listing questions", exc)
        return ToolResponse.ok(
            f"Questions for survey ID {survey_id} retrieved successfully", questions
        )

    @tool("list_question_groups", "Lists all question groups for a specific survey")
    async def list_question_groups(
        self,
        survey_id: SurveyId,
        language: Annotated[
            Optional[str], Field(description="Optional: Language for group texts")
        ] = None,
    ) -> ToolResponse:
        try:
            groups = await self.gateway.list_groups(survey_id, blank_to_none(language))
        except Exception as exc:
            return ToolResponse.failure("Error listing question groups", exc)
        return ToolResponse.ok(
            f"Question groups for survey ID {survey_id} retrieved successfully", groups
        )

    @tool("get_question_properties", "Gets properties for a specific question")
    async def get_question_properties(
        self,
        question_id: Annotated[str, Field(description="The ID of the question")],
        language: Annotated[
            Optional[str], Field(description="Optional: Language for question texts")
        ] = None,
        properties: Annotated[
            Optional[list[str]],
            Field(description="Optional: Array of property names to retrieve"),
        ] = None,
    ) -> ToolResponse:
        try:
            result = await self.gateway.get_question_properties(
                question_id, blank_to_none(properties), blank_to_none(language)
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving question properties", exc)
        return ToolResponse.ok(
            f"Properties for question ID {question_id} retrieved successfully", result
        )
