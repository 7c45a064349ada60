"""
Exceptions raised by the Textmarketer client.

Every error derives from TextmarketerError so callers can catch the whole
family in one place. None of them are retried by this library.
"""

from typing import Any, Optional, Sequence


class TextmarketerError(Exception):
    """Base class for all client errors"""


class MissingConfig(TextmarketerError):
    """No config was supplied, or the selected config source has nothing to read"""


class ConfigValidationFailure(TextmarketerError):
    """Required config keys were missing, empty or null"""

    def __init__(self, missing_keys: Sequence[str], invalid_keys: Sequence[str]):
        self.missing_keys = list(missing_keys)
        self.invalid_keys = list(invalid_keys)

        message = "Provided config failed validation! "
        if self.missing_keys:
            message += "The following keys were missing: " + ", ".join(self.missing_keys)
        if self.invalid_keys:
            message += "The following keys were found to be empty or null: " + ", ".join(self.invalid_keys)

        super().__init__(message)


class MissingHttpMethod(TextmarketerError):
    def __init__(self):
        super().__init__("The request type must be specified! Valid options are POST and GET")


class UnsupportedMethod(TextmarketerError):
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported request type '{method}'. Valid options are POST and GET")


class UnsupportedResponseType(TextmarketerError):
    def __init__(self, response_type: Any):
        self.response_type = response_type
        super().__init__(f"Unsupported response type '{response_type}'. Valid options are json and xml")


class TransportError(TextmarketerError):
    """The HTTP call itself failed (DNS, refused connection, timeout...)"""


class MalformedResponse(TextmarketerError):
    """The response body could not be decoded as the configured format"""

    def __init__(self, message: str, body: Optional[str] = None):
        self.body = body
        super().__init__(message)


class ApiError(TextmarketerError):
    """The gateway answered with a non-2xx status code"""

    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Textmarketer API returned HTTP {status_code}: {body}")
