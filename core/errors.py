"""
StudyPacket - Error Types
Failures raised by the import pipeline. str(exc) is the user-facing message.
"""


class StudyPacketError(Exception):
    """Base class for all pipeline failures."""


class InvalidInput(StudyPacketError):
    """The file is not a recognized document."""


class ExtractionFailed(StudyPacketError):
    """The document contains no readable text."""


class ServiceUnavailable(StudyPacketError):
    """No analysis backend could analyze the document."""

    def __init__(self, message: str = "AI service is not available") -> None:
        super().__init__(message)


class BackendError(StudyPacketError):
    """Network or API level failure inside a single backend."""


class ParsingError(StudyPacketError):
    """A backend returned malformed JSON or an unexpected response shape."""
