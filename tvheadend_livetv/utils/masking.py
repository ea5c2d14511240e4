"""
Credential masking for log output.

Every constructed URL passes through mask_sensitive_data before it is logged.
"""
import base64
from urllib.parse import quote

from tvheadend_livetv.config import TvheadendSettings


MASK = "***"


def encode_basic_credentials(username: str, password: str) -> str:
    """Base64 of "username:password" as sent in a Basic-Auth header."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def mask_sensitive_data(text: str, config: TvheadendSettings) -> str:
    """
    Replace credential material in text with a fixed marker

    Masks the auth token, the plain and percent-encoded "username:password"
    pair, and its Base64 encoding.

    Args:
        text: Free text, usually a URL about to be logged
        config: Current connection settings

    Returns:
        Text with every credential occurrence replaced by "***"
    """
    if not text:
        return text

    if config.auth_token.strip():
        text = text.replace(config.auth_token, MASK)

    if config.username.strip() and config.password.strip():
        credentials = f"{config.username}:{config.password}"
        url_credentials = f"{quote(config.username, safe='')}:{quote(config.password, safe='')}"
        text = text.replace(credentials, MASK)
        text = text.replace(url_credentials, MASK)
        text = text.replace(encode_basic_credentials(config.username, config.password), MASK)

    return text
