import json

import httpx
import pytest

from restclient import RestClient

BASE_URL = "https://api.example.com/v1"


class Recorder:
    """MockTransport handler that records requests and replays a canned response."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.headers = {"Content-Type": "application/json"}
        self.content = b"{}"
        self.error = None

    def respond(self, status_code=200, json_body=None, content=None, headers=None):
        self.status_code = status_code
        if json_body is not None:
            self.content = json.dumps(json_body).encode()
        elif content is not None:
            self.content = content
        if headers is not None:
            self.headers = headers
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, headers=self.headers, content=self.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def http_client(recorder):
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


@pytest.fixture
def make_client(http_client):
    def factory(cls=RestClient, base_url=BASE_URL, **kwargs):
        kwargs.setdefault("client", http_client)
        return cls(base_url, **kwargs)
    return factory
