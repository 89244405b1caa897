"""Exception hierarchy shared by the store, the detection client and the lifecycle."""


class FaceTrackError(Exception):
    """Base class for all face-track errors."""


class NotFoundError(FaceTrackError):
    """The task or image does not exist."""


class InvalidStateError(FaceTrackError):
    """The operation is not allowed in the task's current state."""


class UpstreamError(FaceTrackError):
    """The face detection service failed or answered with an error."""


class PersistenceError(FaceTrackError):
    """A database or file write/read failed."""
