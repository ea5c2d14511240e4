from urllib.parse import parse_qs

import httpx
import pytest

from tvheadend_livetv.config import TvheadendSettings
from tvheadend_livetv.services import LiveTvService


def make_settings(**overrides) -> TvheadendSettings:
    values = {
        "host": "tvh.local",
        "port": 9981,
        "username": "admin",
        "password": "secret",
        "auth_token": "tok123",
    }
    values.update(overrides)
    return TvheadendSettings(_env_file=None, **values)


class FakeTvheadend:
    """Canned TVHeadend API answering through httpx.MockTransport"""

    def __init__(self):
        self.responses: dict[str, httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def reply(self, path: str, payload=None, status_code: int = 200, text: str | None = None) -> None:
        if text is not None:
            self.responses[path] = httpx.Response(status_code, text=text)
        else:
            self.responses[path] = httpx.Response(status_code, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get(request.url.path.lstrip("/"))
        if response is None:
            return httpx.Response(404, text="Not found")
        return httpx.Response(response.status_code, content=response.content, headers=response.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [request.url.path.lstrip("/") for request in self.requests]

    def form(self, path: str) -> dict[str, str]:
        """Decoded form body of the last POST to path"""
        for request in reversed(self.requests):
            if request.method == "POST" and request.url.path.lstrip("/") == path:
                parsed = parse_qs(request.content.decode("utf-8"))
                return {key: values[0] for key, values in parsed.items()}
        raise AssertionError(f"No POST to {path}")


@pytest.fixture
def settings() -> TvheadendSettings:
    return make_settings()


@pytest.fixture
def fake_tvh() -> FakeTvheadend:
    fake = FakeTvheadend()
    fake.reply("api/dvr/config/grid", {"entries": [
        {"uuid": "profile-uuid", "name": "Default", "enabled": True},
        {"uuid": "other-uuid", "name": "Archive", "enabled": True},
    ]})
    return fake


@pytest.fixture
async def service(settings, fake_tvh):
    live_tv = LiveTvService(lambda: settings, transport=fake_tvh.transport)
    yield live_tv
    await live_tv.aclose()
