"""
Exception types shared across the interview coach.
"""


class CoachError(Exception):
    """Base class for all interview coach errors."""


class MicrophonePermissionError(CoachError):
    """The microphone is missing or access to it was denied."""


class EmptyAudioError(CoachError):
    """A recording contained no audio bytes."""


class RemoteCallError(CoachError):
    """A call to the generative AI service failed."""

    def __init__(self, message: str, status_code: int = None, transient: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class GenerationTimeoutError(RemoteCallError):
    """A generative call did not finish within its caller-side deadline."""

    def __init__(self, message: str):
        super().__init__(message, transient=True)


class MalformedResponseError(RemoteCallError):
    """The service answered, but the payload did not match the expected schema."""


class AccessDeniedError(CoachError):
    """Sign-in or admin verification was refused."""


class StoreError(CoachError):
    """The document store could not complete an operation."""
