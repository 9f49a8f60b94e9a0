from __future__ import annotations


class RelayError(Exception):
    """Base for failures surfaced to the client as a 500 ``{message}``."""


class UpstreamFailure(RelayError):
    """The completion provider call raised or timed out."""


class MalformedProviderResponse(RelayError):
    """The provider answered, but not in the shape we asked for."""
