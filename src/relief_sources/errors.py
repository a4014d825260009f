"""Exception taxonomy for the aggregation pipeline.

Only ``InvalidInput`` is fatal to a request. Every other error is caught by
the pipeline and degrades into an entry of the response's ``errors`` list or
a log line.
"""


class ReliefSourcesError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInput(ReliefSourcesError):
    """The request itself is malformed (e.g. a bad ZIP code)."""


class AdapterFailure(ReliefSourcesError):
    """A single source could not produce results."""


class GeocodeError(AdapterFailure):
    """The geocoding service could not resolve a postal code."""


class UpstreamConfigError(AdapterFailure):
    """A credential or setting required by an adapter is missing."""


class PersistenceFailure(ReliefSourcesError):
    """The cache/store could not be read or written."""
