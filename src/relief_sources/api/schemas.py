"""Request/response schemas for the HTTP API."""

from pydantic import AliasChoices, BaseModel, Field


class SearchRequest(BaseModel):
    """Body of ``POST /search-disaster-resources`` and ``/search-recovery-resources``.

    The ZIP code is accepted under any of the field names older clients send.
    """

    zip_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("zipCode", "requested_zipcode", "zip_code"),
    )


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
