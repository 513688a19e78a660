"""Error taxonomy for the recommendation pipeline."""

from __future__ import annotations


class SahulatError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(SahulatError):
    """A required credential or setting is missing."""


class UpstreamTransportError(SahulatError):
    """Network failure, timeout or non-2xx response from an external service."""


class MalformedResponseError(SahulatError):
    """The completion backend returned text that is not the expected JSON shape."""
