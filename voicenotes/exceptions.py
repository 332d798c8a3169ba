"""Error taxonomy for Voice Notes."""


class VoiceNotesError(Exception):
    """Base class for all Voice Notes errors."""


class InvalidInputError(VoiceNotesError):
    """Raised when a transcription request carries no audio payload."""


class UpstreamFailureError(VoiceNotesError):
    """Raised when the transcription service or the network to it fails."""


class MediaAccessDeniedError(VoiceNotesError):
    """Raised when the microphone cannot be opened."""


class SaveFailureError(VoiceNotesError):
    """Raised when a note could not be persisted."""


class InvalidStateError(VoiceNotesError):
    """Raised on a recording transition that is not valid from the current state."""
