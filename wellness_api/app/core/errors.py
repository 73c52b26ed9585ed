"""
Error taxonomy for the record services.

Every error raised by a store or a service derives from
``WellnessError`` and carries the HTTP status it maps to.  The
application installs a handler (see ``main.py``) that renders these
as the JSON envelope ``{"success": false, "error": "<message>"}``.
"""


class WellnessError(Exception):
    """Base class for errors surfaced through the API envelope."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WellnessError):
    """A required field is missing or a supplied field is malformed."""

    status_code = 400


class NotFoundError(WellnessError):
    """The record addressed by an update does not exist."""

    status_code = 404


class StorageError(WellnessError):
    """The key/value or blob backend failed.  Message includes the cause."""

    status_code = 500


class BlobExistsError(StorageError):
    """An upload targeted a path that already holds an object."""


class UploadError(WellnessError):
    """Writing a photo failed while creating a memory."""

    status_code = 500
