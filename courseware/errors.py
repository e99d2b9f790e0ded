"""Errors raised by the LMS client and the courseware data layer.

Request-level errors (NetworkFailure, RequestFailure, ParseFailure) never
reach the UI: orchestrators catch them, report them, and turn them into a
terminal FetchStatus. Denied access is not an error at all; it is
FetchStatus.denied.
"""


class CoursewareError(Exception):
    """Base class for courseware data layer errors."""

    pass


class NetworkFailure(CoursewareError):
    """Raised when a request gets no response (connection, DNS, timeout)."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Network failure for {url}: {message}")


class RequestFailure(CoursewareError):
    """Raised when the LMS answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request to {url} failed: HTTP {status_code}")


class ParseFailure(CoursewareError):
    """Raised when a 2xx response body cannot be read by this layer."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Could not parse response from {url}: {message}")


class ResourceNotLoadedError(CoursewareError):
    """Raised by require_loaded() when a prerequisite fetch has not loaded."""

    pass
