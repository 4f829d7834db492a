# Error taxonomy for pitch generation and storage


class PitchError(Exception):
    """Base class for all pitchgen errors."""


class ConfigurationError(PitchError):
    """A required external dependency has no configured address or credential."""


class UpstreamError(PitchError):
    """A configured dependency returned a failed, empty or unusable result."""


class AuthError(PitchError):
    """The bearer credential is missing or could not be verified."""


class NotFoundError(PitchError):
    """The record does not exist or is not owned by the requester."""


class PersistenceError(PitchError):
    """A document store operation failed."""
