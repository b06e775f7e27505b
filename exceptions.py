"""Custom exception classes for volleytrack."""

from __future__ import annotations

from typing import Optional


class VolleyTrackError(Exception):
    """Base exception for all volleytrack errors."""

    pass


class SampleError(VolleyTrackError):
    """Base exception for position sample errors."""

    pass


class InvalidSampleError(SampleError):
    """Raised when a sample is malformed or out of order."""

    def __init__(self, message: str, timestamp: Optional[float] = None):
        self.timestamp = timestamp
        super().__init__(message)


class SessionError(VolleyTrackError):
    """Base exception for tracking session lifecycle errors."""

    pass


class NoActiveSessionError(SessionError):
    """Raised when a session operation needs an active session and none exists."""

    pass


class DoubleStartError(SessionError):
    """Raised when a session is started while another one is active."""

    def __init__(self, message: str, active_session_id: Optional[str] = None):
        self.active_session_id = active_session_id
        super().__init__(message)


class ConfigError(VolleyTrackError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class DetectionError(VolleyTrackError):
    """Base exception for detection-related errors."""

    pass


class DetectionSourceError(DetectionError):
    """Raised when a detection source cannot produce samples."""

    pass


class RecordingError(VolleyTrackError):
    """Base exception for session persistence errors."""

    pass


class FileWriteError(RecordingError):
    """Raised when file write operation fails."""

    pass


class SessionNotFoundError(RecordingError):
    """Raised when a stored session cannot be found."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        self.session_id = session_id
        super().__init__(message)
