# =============================================================================
# limesurvey_tools/files.py  —  Files attached to file-upload questions
# =============================================================================
#
#   upload_survey_file   (mutating) attach a base64 file to a question field
#   get_uploaded_files   files of a survey, a participant or a response
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class FileTools(ToolGroup):

    @tool("upload_survey_file", "Uploads a file to a survey", read_only=False)
    async def upload_survey_file(
        self,
        survey_id: SurveyId,
        field_name: Annotated[
            str, Field(description="Field name of the file-upload question (SIDxGIDxQID)")
        ],
        file_name: Annotated[str, Field(description="The name of the file (including extension)")],
        file_data: Annotated[str, Field(description="Base64 encoded file content")],
    ) -> ToolResponse:
        """Attach a base64 file to a file-upload question field."""
        try:
            result = await self.gateway.upload_file(survey_id, field_name, file_name, file_data)
        except Exception as exc:
            return ToolResponse.failure("Error uploading file", exc)
        return ToolResponse.ok(f'File "{file_name}" uploaded successfully to survey {survey_id}', result)

    @tool("get_uploaded_files", "Gets a list of files uploaded to a survey")
    async def get_uploaded_files(
        self,
        survey_id: SurveyId,
        token: Annotated[
            Optional[str], Field(description="Optional: Only files uploaded by this participant token")
        ] = None,
        response_id: Annotated[
            Optional[int], Field(description="Optional: Only files attached to this response")
        ] = None,
    ) -> ToolResponse:
        """List uploaded files, optionally narrowed to one token or response.

        An empty result is reported as "No files found", not as an error.
        """
        try:
            result = await self.gateway.get_uploaded_files(
                survey_id, blank_to_none(token), response_id
            )
        except Exception as exc:
            return ToolResponse.failure("Error getting uploaded files", exc)

        if not result:
            return ToolResponse.text(f"No files found for survey {survey_id}")
        return ToolResponse.ok(f"Files for survey {survey_id} retrieved successfully", result)
