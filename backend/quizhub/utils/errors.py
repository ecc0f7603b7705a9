"""
Error taxonomy shared by services and routers.

Every error carries the HTTP status it should be reported with; the
handlers registered in ``main.py`` turn them into ``{"message": ...}``.
"""
from typing import Optional


class QuizHubError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(QuizHubError):
    status_code = 400


class NotFound(QuizHubError):
    status_code = 404


class Forbidden(QuizHubError):
    status_code = 403


class Conflict(QuizHubError):
    status_code = 403


class Unauthorized(QuizHubError):
    status_code = 401


class WindowClosed(Conflict):
    status_code = 400

    def __init__(self, message: str = "Quiz is not available"):
        super().__init__(message)


class AlreadyAttempted(Conflict):
    def __init__(self, message: str = "Quiz already attempted"):
        super().__init__(message)


class ResultsNotYetAvailable(Forbidden):
    def __init__(self, message: str = "Results not available until quiz ends"):
        super().__init__(message)


class QuizLocked(ValidationError):
    """Raised when a quiz is modified after its start time."""
