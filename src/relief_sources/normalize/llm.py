"""Parse LLM answers into raw results: strict JSON first, prose as fallback."""

import json
import logging
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from relief_sources.data import RawResult, ResourceSource
from relief_sources.normalize.ids import stable_source_id
from relief_sources.normalize.prose import parse_resource_text

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class LLMGeolocation(BaseModel):
    lat: float
    lng: float


class LLMResource(BaseModel):
    """One resource as the JSON prompt asks the model to emit it."""

    name: str = ""
    address: str | None = None
    phone: str | None = None
    description: str | None = None
    url: str | None = Field(default=None, validation_alias=AliasChoices("url", "website"))
    email: str | None = None
    hours: str | None = None
    categories: list[str] = Field(default_factory=list)
    geolocation: LLMGeolocation | None = None

    model_config = {"extra": "ignore"}

    @field_validator("name", "address", "phone", "description", "url", "email", "hours", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return None

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        return v

    @field_validator("geolocation", mode="before")
    @classmethod
    def _drop_bad_geolocation(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return None
        try:
            return {"lat": float(v["lat"]), "lng": float(v["lng"])}
        except (KeyError, TypeError, ValueError):
            return None


class LLMResourcePayload(BaseModel):
    """Top-level JSON object: ``{"zipCode": ..., "results": [...]}``."""

    results: list[LLMResource] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


def _strip_code_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else ""
        raw = raw.rsplit("```", 1)[0]
    return raw


def _load_json(text: str) -> Any:
    raw = _strip_code_fences(text)
    for pattern in (_JSON_OBJECT_RE, _JSON_ARRAY_RE):
        match = pattern.search(raw)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
    return None


def parse_json_resources(
    text: str,
    *,
    source: ResourceSource,
    postal_code: str,
) -> list[RawResult] | None:
    """Parse a JSON-only model answer.

    Returns:
        The parsed results, or ``None`` if no valid JSON payload was found.
    """
    data = _load_json(text)
    if data is None:
        return None
    if isinstance(data, list):
        data = {"results": data}
    try:
        payload = LLMResourcePayload.model_validate(data)
    except ValidationError as e:
        logger.warning(f"LLM JSON payload failed validation: {e.error_count()} errors")
        return None

    results: list[RawResult] = []
    for item in payload.results:
        name = (item.name or "").strip()
        if not name:
            continue
        results.append(
            RawResult(
                name=name,
                source=source,
                source_id=stable_source_id(postal_code, name),
                description=item.description,
                categories=tuple(item.categories),
                phone=item.phone,
                website=item.url,
                email=item.email,
                address=item.address,
                hours=item.hours,
                latitude=item.geolocation.lat if item.geolocation else None,
                longitude=item.geolocation.lng if item.geolocation else None,
            )
        )
    return results


def parse_llm_content(
    text: object,
    *,
    source: ResourceSource,
    postal_code: str,
    expect_json: bool = True,
) -> list[RawResult]:
    """Turn a model answer into raw results without raising.

    With ``expect_json`` the answer is parsed as strict JSON and the prose
    heuristics are only a fallback; otherwise prose parsing is used directly.
    Missing, non-text or unparseable content yields an empty list.
    """
    if not isinstance(text, str) or not text.strip():
        logger.warning(f"{source}: model returned no content")
        return []

    if expect_json:
        parsed = parse_json_resources(text, source=source, postal_code=postal_code)
        if parsed is not None:
            return parsed
        logger.info(f"{source}: no valid JSON in answer, falling back to prose parsing")

    results = parse_resource_text(text, source=source, postal_code=postal_code)
    if not results:
        logger.warning(f"{source}: could not extract any resources from answer")
    return results
