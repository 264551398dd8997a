"""Unified data models for extracted API documentation.

The extractor turns decorator metadata into these models; the
emitters serialize them. Optional fields are only present in the
output when the source declared them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SchemaNode(BaseModel):
    """Shape of a value: scalar type, array items or object properties."""

    type: str = "string"  # string / number / boolean / array / object / <TypeName>
    description: str | None = None
    example: Any = None
    enum: list[str] | None = None
    items: "SchemaNode | None" = None
    properties: dict[str, "SchemaNode"] | None = None
    required: bool | None = None
    format: str | None = None
    nullable: bool | None = None


class ResponseDescriptor(BaseModel):
    """One documented response of an endpoint."""

    status: int
    description: str = ""
    schema_: SchemaNode | None = Field(default=None, alias="schema")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_error(self) -> bool:
        return self.status >= 400


class EndpointDocument(BaseModel):
    """A single documented endpoint with all its metadata."""

    method: str  # GET / POST / PUT / DELETE / PATCH
    route: str  # categories/:id
    summary: str = ""
    description: str | None = None
    request_body: SchemaNode | None = Field(default=None, alias="requestBody")
    response: ResponseDescriptor | None = None
    error_responses: list[ResponseDescriptor] | None = Field(default=None, alias="errorResponses")
    controller: str = Field(default="", exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump with the documented key names, leaving out undeclared fields."""
        return self.model_dump(by_alias=True, exclude_unset=True)


SchemaNode.model_rebuild()
