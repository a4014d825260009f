"""Disaster-relief search using Perplexity's online chat/completions API."""

import logging
from typing import Literal

import httpx

from relief_sources.data import APICallUsage, RawResult, ResourceSource, Usage
from relief_sources.errors import AdapterFailure, UpstreamConfigError
from relief_sources.normalize.llm import parse_llm_content
from relief_sources.search.prompts import (
    PERPLEXITY_JSON_PROMPT,
    PERPLEXITY_PROSE_PROMPT,
    PERPLEXITY_SYSTEM_PROMPT,
    render_prompt,
)

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"

logger = logging.getLogger(__name__)


class PerplexitySearcher:
    """Search recent news and official sources for relief resources.

    Perplexity answers in prose by default; the answer is parsed with the
    section/bullet heuristics. With ``output_format="json"`` the model is
    asked for JSON and prose parsing is only the fallback.

    Args:
        api_key: Perplexity API key. A missing key is reported as
            ``UpstreamConfigError`` when ``search`` is called.
        model: Perplexity model (default: sonar).
        output_format: ``"prose"`` or ``"json"``.
        max_tokens: Completion token limit.
        timeout: HTTP timeout in seconds.
    """

    source = ResourceSource.LLM_SEARCH_B

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = "sonar",
        output_format: Literal["prose", "json"] = "prose",
        max_tokens: int = 800,
        timeout: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._output_format = output_format
        self._max_tokens = max_tokens
        self._timeout = timeout

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        if not self._api_key:
            raise UpstreamConfigError("Perplexity API key not configured")

        template = PERPLEXITY_JSON_PROMPT if self._output_format == "json" else PERPLEXITY_PROSE_PROMPT
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": PERPLEXITY_SYSTEM_PROMPT},
                {"role": "user", "content": render_prompt(template, postal_code)},
            ],
            "temperature": 0.1,
            "top_p": 0.7,
            "max_tokens": self._max_tokens,
            "return_images": False,
            "return_related_questions": False,
            "search_domain_filter": ["gov", "org", "edu"],
            "search_recency_filter": "month",
            "frequency_penalty": 1,
            "presence_penalty": 0,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(PERPLEXITY_API_URL, json=body, headers=headers)
            response.raise_for_status()
            data = response.json()

        try:
            answer = data["choices"][0]["message"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise AdapterFailure("Malformed Perplexity response") from e

        citations = data.get("citations") or []
        logger.debug(f"Perplexity cited {len(citations)} sources for {postal_code}")

        token_usage = data.get("usage") or {}
        usage = Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=token_usage.get("prompt_tokens", 0) or 0,
                    output_tokens=token_usage.get("completion_tokens", 0) or 0,
                )
            ],
            perplexity_requests=1,
        )

        results = parse_llm_content(
            answer,
            source=self.source,
            postal_code=postal_code,
            expect_json=self._output_format == "json",
        )
        logger.info(f"Perplexity search for {postal_code} returned {len(results)} results")
        return (results, usage)
