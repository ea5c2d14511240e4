"""
URL and authentication construction for TVHeadend requests.
"""
import logging
from enum import Enum
from urllib.parse import quote

from tvheadend_livetv.config import TvheadendSettings


logger = logging.getLogger(__name__)


class AuthMode(Enum):
    """How credentials travel with a request"""
    URL = "url"  # user:pass@ spliced into the URL, for URLs handed to players
    HEADER = "header"  # Basic-Auth header on the cached client
    PARAMETER = "parameter"  # ?auth=<token>, for image URLs


def normalize_webroot(webroot: str | None) -> str:
    """Return the web root with exactly one trailing slash ("/" when blank)."""
    if not webroot or not webroot.strip():
        return "/"
    return webroot.strip().rstrip("/") + "/"


def build_base_address(config: TvheadendSettings) -> str:
    """Scheme, host and port without web root, e.g. http://tvh:9981/"""
    return f"{config.scheme}://{config.host}:{config.port}/"


def build_url(
    config: TvheadendSettings,
    endpoint: str,
    auth_mode: AuthMode = AuthMode.HEADER,
) -> str:
    """
    Build an absolute TVHeadend URL for an endpoint

    Args:
        config: Current connection settings
        endpoint: Path relative to the web root, optionally with a query string
        auth_mode: How credentials are attached; ignored for anonymous access

    Returns:
        Absolute URL. In HEADER mode credentials are carried by the client
        from ClientCache, so the URL itself stays bare.
    """
    webroot = normalize_webroot(config.webroot)
    url = f"{config.scheme}://{config.host}:{config.port}{webroot}{endpoint.lstrip('/')}"

    if config.allow_anonymous_access:
        return url

    if auth_mode is AuthMode.URL:
        credentials = f"{quote(config.username, safe='')}:{quote(config.password, safe='')}"
        scheme, rest = url.split("://", 1)
        return f"{scheme}://{credentials}@{rest}"

    if auth_mode is AuthMode.PARAMETER:
        if not config.auth_token.strip():
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}auth={config.auth_token}"

    if config.use_ssl and config.ignore_certificate_errors:
        logger.warning(
            "Ignoring SSL certificate errors. This is not recommended for production environments."
        )
    return url
