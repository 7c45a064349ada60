import pytest
import requests


def make_response(body: str, status_code: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeSession:
    """Records calls and hands back a canned response instead of touching the network"""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else make_response('{"message_id": "1"}')
        self.error = error
        self.calls = []

    def _call(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._call("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._call("POST", url, **kwargs)


@pytest.fixture
def valid_config():
    return {"username": "test", "password": "test", "endpoint": "/json-test", "response_type": "json"}


@pytest.fixture
def no_env_config(monkeypatch):
    monkeypatch.delenv("TRUE9_TEXTMARKETER_CLIENT_CONFIG", raising=False)
