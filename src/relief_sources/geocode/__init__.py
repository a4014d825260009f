from relief_sources.geocode.base import Geocoder
from relief_sources.geocode.google import GoogleGeocoder

__all__ = [
    "Geocoder",
    "GoogleGeocoder",
]
