"""LiftTrack exceptions."""


class LiftTrackError(Exception):
    """Base exception for LiftTrack errors."""
    pass


class PersistenceError(LiftTrackError):
    """Raised when the session store cannot complete a request.

    The data being written is kept by the caller so the request can be
    retried.
    """

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class ProfileError(LiftTrackError):
    """Raised when profile settings cannot be written."""
    pass
