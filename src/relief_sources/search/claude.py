import logging

import anthropic

from relief_sources.data import APICallUsage, RawResult, ResourceSource, Usage
from relief_sources.errors import UpstreamConfigError
from relief_sources.normalize.llm import parse_llm_content
from relief_sources.search.prompts import CLAUDE_SEARCH_PROMPT, render_prompt

logger = logging.getLogger(__name__)


class ClaudeSearcher:
    """Find disaster-relief resources by asking Claude for a JSON listing.

    The prompt embeds the ZIP code and the category taxonomy and asks for
    JSON only. With ``max_searches > 0`` Claude may use its server-side web
    search tool to ground the answer. Answers that are not valid JSON fall
    back to the prose parser; an answer with no usable content yields an
    empty list.

    Note: Web search must be enabled in your Anthropic Console settings.

    Args:
        api_key: Anthropic API key. A missing key is reported as
            ``UpstreamConfigError`` when ``search`` is called.
        model: Model to use (default: claude-haiku-4-5-20251001).
        max_searches: Max web searches per request; 0 disables the tool.
        max_tokens: Completion token limit.
        prompt_template: Custom prompt. Must contain ``{postal_code}``;
            may contain ``{categories}``.
    """

    source = ResourceSource.LLM_SEARCH_A

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = "claude-haiku-4-5-20251001",
        max_searches: int = 0,
        max_tokens: int = 2048,
        prompt_template: str | None = None,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key) if api_key else None
        self._model = model
        self._max_searches = max_searches
        self._max_tokens = max_tokens
        self._prompt_template = prompt_template or CLAUDE_SEARCH_PROMPT

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        if self._client is None:
            raise UpstreamConfigError("Anthropic API key not configured")

        kwargs: dict[str, object] = {}
        if self._max_searches > 0:
            kwargs["tools"] = [
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": self._max_searches,
                }
            ]

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            messages=[{"role": "user", "content": render_prompt(self._prompt_template, postal_code)}],
            **kwargs,  # type: ignore[arg-type]
        )

        web_searches = 0
        server_tool_use = getattr(response.usage, "server_tool_use", None)
        if server_tool_use is not None:
            web_searches = getattr(server_tool_use, "web_search_requests", 0) or 0

        usage = Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                    web_searches=web_searches,
                ),
            ],
        )

        # With web search enabled the answer is split across several text blocks
        text = "\n".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        results = parse_llm_content(
            text,
            source=self.source,
            postal_code=postal_code,
            expect_json=True,
        )
        logger.info(f"Claude search for {postal_code} returned {len(results)} results")
        return (results, usage)
