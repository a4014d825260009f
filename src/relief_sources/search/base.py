from typing import Protocol

from relief_sources.data import RawResult, ResourceSource, Usage


class ResourceSearcher(Protocol):
    """Interface for one external source of disaster-relief resources."""

    source: ResourceSource

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        """Search for resources serving a ZIP code.

        Args:
            postal_code: A validated ZIP code.

        Returns:
            Tuple of (raw results, usage).

        Raises:
            UpstreamConfigError: If a required credential is missing.
            AdapterFailure: If the source cannot produce results.
            httpx.HTTPError: On transport errors or non-2xx responses.
        """
        ...
