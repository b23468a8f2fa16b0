"""Custom exception hierarchy for Story Recorder.

All application exceptions inherit from :class:`StoryRecorderError`, which
carries an optional ``component`` so error handlers can identify which part
of the upload pipeline (e.g. "counter", "relocator", "ffmpeg") failed.

The hierarchy is organized by failure class:

    StoryRecorderError  (base -- catch-all for any story-recorder error)
    +-- UploadValidationError  (client-correctable: author/category/file)
    +-- TransientIOError       (locked/busy file, retried locally)
    +-- TranscodeError         (external tool failed, degrades gracefully)
    +-- StorageError           (store unreadable/corrupt -- fatal)
    +-- RelocationError        (upload file could not be moved -- fatal)
    +-- ConfigurationError     (startup / invalid config)

Each class declares the HTTP ``status_code`` and the machine-readable
``error_code`` that ``ErrorHandlingMiddleware`` returns to the client.
"""

from __future__ import annotations

from enum import Enum


class StoryRecorderError(Exception):
    """Base exception for all Story Recorder errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``component`` identifying where the error was raised.  The ``__str__``
    method prefixes the component in brackets for log output, e.g.
    ``[counter] counter.json is not valid JSON``.
    """

    status_code: int = 500
    error_code: str = "internal_failure"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        component: str | None = None,
    ) -> None:
        self._message = message
        self._component = component
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def component(self) -> str | None:
        return self._component

    @property
    def http_status(self) -> int:
        return self.status_code

    def __str__(self) -> str:
        if self._component:
            return f"[{self._component}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client-correctable errors
# ---------------------------------------------------------------------------

class ValidationKind(str, Enum):
    """Distinct reasons an upload is rejected before touching any store."""

    MISSING_AUTHOR = "missing_author"
    INVALID_CATEGORY = "invalid_category"
    MISSING_FILE = "missing_file"
    FILE_TOO_LARGE = "file_too_large"


_VALIDATION_MESSAGES = {
    ValidationKind.MISSING_AUTHOR: "Please enter your name.",
    ValidationKind.INVALID_CATEGORY: "Invalid category.",
    ValidationKind.MISSING_FILE: "No audio file received.",
    ValidationKind.FILE_TOO_LARGE: "The audio file is too large.",
}


class UploadValidationError(StoryRecorderError):
    """Raised when an upload fails validation (author, category, file).

    The ``kind`` doubles as the ``error_code`` in the JSON response so the
    client can show a matching message.
    """

    status_code = 400

    def __init__(
        self,
        kind: ValidationKind,
        message: str | None = None,
        component: str | None = "upload",
    ) -> None:
        self._kind = kind
        super().__init__(message=message or _VALIDATION_MESSAGES[kind], component=component)

    @property
    def kind(self) -> ValidationKind:
        return self._kind

    @property
    def error_code(self) -> str:  # type: ignore[override]
        return self._kind.value

    @property
    def http_status(self) -> int:
        if self._kind is ValidationKind.FILE_TOO_LARGE:
            return 413
        return self.status_code


# ---------------------------------------------------------------------------
# Filesystem / tool errors
# ---------------------------------------------------------------------------

class TransientIOError(StoryRecorderError):
    """Raised for a filesystem error worth retrying (EBUSY, EPERM, ...).

    Only ever raised and handled inside the file relocator; exhausting
    its retries escalates to :class:`RelocationError`.
    """

    def __init__(
        self,
        message: str = "Transient filesystem error",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


class TranscodeError(StoryRecorderError):
    """Raised when the external transcoder is missing, crashes, or times out.

    Callers of the transcode adapter never see this: ``fix()`` converts it
    into a ``None`` result so the upload falls back to the client estimate.
    """

    def __init__(
        self,
        message: str = "Audio transcoding failed",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------

class StorageError(StoryRecorderError):
    """Raised when the counter or metadata document can't be read or written."""

    def __init__(
        self,
        message: str = "Story storage failed",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


class RelocationError(StoryRecorderError):
    """Raised when an uploaded file can't be moved to its final location."""

    def __init__(
        self,
        message: str = "Could not move the uploaded file",
        component: str | None = "relocator",
    ) -> None:
        super().__init__(message=message, component=component)


class ConfigurationError(StoryRecorderError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)
