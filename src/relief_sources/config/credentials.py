"""Secrets and connection strings read from the environment."""

import os
from collections.abc import Mapping

from pydantic import BaseModel


class Credentials(BaseModel):
    """API keys and database URL.

    Kept out of the YAML config so config files can be committed. A missing
    key is not an error here; the adapter that needs it reports it at search
    time.
    """

    maps_api_key: str | None = None
    directory_api_key: str | None = None
    claude_api_key: str | None = None
    perplexity_api_key: str | None = None
    database_url: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Credentials":
        """Read credentials from environment variables.

        Reads ``MAPS_API_KEY``, ``DIRECTORY_API_KEY``, ``CLAUDE_API_KEY``
        (falling back to ``ANTHROPIC_API_KEY``), ``PERPLEXITY_API_KEY`` and
        ``DATABASE_URL``. Empty values count as unset.
        """
        env = os.environ if environ is None else environ

        def get(*names: str) -> str | None:
            for name in names:
                value = (env.get(name) or "").strip()
                if value:
                    return value
            return None

        return cls(
            maps_api_key=get("MAPS_API_KEY"),
            directory_api_key=get("DIRECTORY_API_KEY"),
            claude_api_key=get("CLAUDE_API_KEY", "ANTHROPIC_API_KEY"),
            perplexity_api_key=get("PERPLEXITY_API_KEY"),
            database_url=get("DATABASE_URL"),
        )
