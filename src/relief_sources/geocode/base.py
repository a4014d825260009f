from typing import Protocol

from relief_sources.data import Coordinates


class Geocoder(Protocol):
    """Interface for resolving a postal code to its centroid."""

    async def geocode(self, postal_code: str) -> Coordinates:
        """Resolve a postal code to latitude/longitude.

        Args:
            postal_code: A validated ZIP code.

        Returns:
            The centroid of the postal code.

        Raises:
            GeocodeError: If the upstream service cannot resolve the code.
            UpstreamConfigError: If the geocoder has no credentials.
        """
        ...
