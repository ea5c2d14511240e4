"""
HTTP transport for TVHeadend requests.

Clients are immutable once built and cached per configuration snapshot, so a
configuration change never alters a client that another request is using.
"""
import hashlib
import logging
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from tvheadend_livetv.config import TvheadendSettings
from tvheadend_livetv.errors import UpstreamRejectedError
from tvheadend_livetv.services.url_builder import build_base_address
from tvheadend_livetv.utils.masking import encode_basic_credentials


logger = logging.getLogger(__name__)


def client_key(config: TvheadendSettings) -> str:
    """
    Hash the settings that shape a client

    Args:
        config: Current connection settings

    Returns:
        Hex digest identifying the client for this configuration
    """
    relevant = "\x1f".join(
        str(part)
        for part in (
            config.scheme,
            config.host,
            config.port,
            config.allow_anonymous_access,
            config.username,
            config.password,
            config.use_ssl and config.ignore_certificate_errors,
            config.request_timeout_sec,
        )
    )
    return hashlib.sha256(relevant.encode("utf-8")).hexdigest()


class ClientCache:
    """
    Configuration-keyed cache of httpx.AsyncClient instances.

    The client of the most recent configuration stays cached. Clients of
    superseded configurations are closed as soon as no lease holds them, and
    aclose() closes whatever is left exactly once.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        """
        Args:
            transport: Optional transport shared by all clients (used by tests)
        """
        self._transport = transport
        self._clients: dict[str, httpx.AsyncClient] = {}
        self._leases: Counter[str] = Counter()
        self._current_key: str | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._clients)

    def get(self, config: TvheadendSettings) -> httpx.AsyncClient:
        """
        Get the client for a configuration snapshot, building it on first use

        Raises:
            RuntimeError: If the cache has been closed
        """
        if self._closed:
            raise RuntimeError("Client cache is closed")

        key = client_key(config)
        self._current_key = key
        client = self._clients.get(key)
        if client is None:
            client = self._build_client(config)
            self._clients[key] = client
            logger.debug(
                "Created HTTP client for %s (%s cached)",
                build_base_address(config),
                len(self._clients),
            )
        return client

    @asynccontextmanager
    async def lease(self, config: TvheadendSettings) -> AsyncIterator[httpx.AsyncClient]:
        """
        Hold the client for a configuration for the duration of one request

        Superseded clients without an open lease are closed on entry and exit.
        """
        client = self.get(config)
        key = client_key(config)
        self._leases[key] += 1
        try:
            await self._close_idle_superseded()
            yield client
        finally:
            self._leases[key] -= 1
            if not self._leases[key]:
                del self._leases[key]
            await self._close_idle_superseded()

    async def _close_idle_superseded(self) -> None:
        idle = [
            key for key in self._clients
            if key != self._current_key and not self._leases[key]
        ]
        for key in idle:
            client = self._clients.pop(key)
            await client.aclose()
        if idle:
            logger.debug("Closed %s superseded HTTP client(s)", len(idle))

    def _build_client(self, config: TvheadendSettings) -> httpx.AsyncClient:
        headers = {}
        if not config.allow_anonymous_access:
            credentials = encode_basic_credentials(config.username, config.password)
            headers["Authorization"] = f"Basic {credentials}"

        kwargs = {
            "base_url": build_base_address(config),
            "headers": headers,
            "timeout": httpx.Timeout(config.request_timeout_sec),
            "verify": not (config.use_ssl and config.ignore_certificate_errors),
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport

        return httpx.AsyncClient(**kwargs)

    async def aclose(self) -> None:
        """Close every cached client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()
        logger.debug("Closed %s HTTP client(s)", len(clients))


async def get_text(client: httpx.AsyncClient, url: str, masked_url: str) -> str:
    """
    GET a URL and return the body text

    Raises:
        UpstreamRejectedError: On a non-2xx response
        httpx.HTTPError: On transport failures
    """
    response = await client.get(url)
    if not response.is_success:
        raise UpstreamRejectedError(
            f"Request to {masked_url} failed",
            response.status_code,
            response.text,
        )
    return response.text


async def post_form(
    client: httpx.AsyncClient,
    url: str,
    form: dict[str, str],
    failure_message: str,
) -> httpx.Response:
    """
    POST a form-encoded body

    Args:
        client: Client for the current configuration
        url: Absolute request URL
        form: Form fields
        failure_message: Message prefix for the error raised on rejection

    Raises:
        UpstreamRejectedError: On a non-2xx response, with status and body
        httpx.HTTPError: On transport failures
    """
    response = await client.post(url, data=form)
    if not response.is_success:
        raise UpstreamRejectedError(failure_message, response.status_code, response.text)
    return response
