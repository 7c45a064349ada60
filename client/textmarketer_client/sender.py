from typing import Optional

from .api_request import AbstractRequest


class SmsSender:
    """Holds the request a caller has configured for sending"""

    def __init__(self, request: Optional[AbstractRequest] = None):
        self._request = None
        if request is not None:
            self.request = request

    @property
    def request(self) -> Optional[AbstractRequest]:
        return self._request

    @request.setter
    def request(self, request: AbstractRequest):
        if not isinstance(request, AbstractRequest):
            raise TypeError(f"Expected an AbstractRequest, got {type(request).__name__}")
        self._request = request
