"""
Error hierarchy for the TVHeadend adapter.

Read operations degrade to empty results on UpstreamError; write operations
always surface it to the caller.
"""


class TvheadendError(Exception):
    """Base class for all adapter errors"""
    pass


class ConfigurationUnavailableError(TvheadendError):
    """Raised when the connection configuration cannot be loaded"""
    pass


class InvalidRequestError(TvheadendError, ValueError):
    """Raised when a request is missing or carries invalid required input"""
    pass


class UpstreamError(TvheadendError):
    """Raised when TVHeadend could not complete an operation"""
    pass


class UpstreamRejectedError(UpstreamError):
    """Raised when TVHeadend answers with a non-2xx status"""

    def __init__(self, message: str, status_code: int, body: str):
        super().__init__(f"{message}. HTTP Status: {status_code}. Response: {body}")
        self.status_code = status_code
        self.body = body


class RecordingProfileError(UpstreamError):
    """Raised when the configured recording profile cannot be resolved"""
    pass
