"""
Error types for the Brainwave Mood service.

These are raised by single-request helpers (one source fetch, one chunk
analysis, one row parse) and caught at the join points, where the failure is
logged and the affected branch simply contributes nothing.
"""


class BrainwaveError(Exception):
    """Base class for all errors raised by this package."""


class InvalidSourceAddress(BrainwaveError):
    """A source or analysis URL could not be built or is not HTTP(S)."""


class TransportFailure(BrainwaveError):
    """The request failed on the network, timed out or returned a non-2xx status."""


class UndecodableBody(BrainwaveError):
    """The response body is not valid UTF-8 text."""


class MalformedRow(BrainwaveError):
    """A data row has too few fields or a non-numeric value."""


class ResponseShapeMismatch(BrainwaveError):
    """The analysis response is not a chat-completion JSON document."""


class SerializationFailure(BrainwaveError):
    """An outbound request body could not be serialized."""
