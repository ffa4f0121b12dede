from typing import Any, Optional


class CustomException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class OpenAIException(CustomException):
    """Failure of a completion call.

    ``status_code`` is the HTTP status the provider answered with, or None for
    timeouts, connection errors and malformed responses.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ConfigurationError(CustomException):
    pass
