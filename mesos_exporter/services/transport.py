"""Authenticated HTTP transport for Mesos endpoints."""

import base64
import logging
import ssl
from typing import List, Optional, Union

import httpx

from ..config.models import AuthConfig
from ..utils.errors import ConfigurationError
from .auth import BasicCredentials, Credentials, NO_CREDENTIALS, StrictCredentials


class RequestSigner:
    """
    Attach credentials to outgoing requests.

    Registered as an httpx request event hook, so it runs on the initial
    request and again on every redirect hop. httpx drops the Authorization
    header when a redirect changes host; Mesos masters routinely redirect to
    a different advertised hostname of the same cluster, so the header is
    set again on each hop.
    """

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    def authorization(self) -> Optional[str]:
        """
        Build the Authorization header value for the configured credentials.

        Returns:
            str or None: Header value, None when nothing should be sent
        """
        creds = self.credentials
        if isinstance(creds, BasicCredentials):
            userpass = f"{creds.username}:{creds.password}".encode()
            return "Basic " + base64.b64encode(userpass).decode("ascii")
        if isinstance(creds, StrictCredentials) and creds.token:
            return f"token={creds.token}"
        return None

    def __call__(self, request: httpx.Request) -> None:
        header = self.authorization()
        if header is not None:
            request.headers["Authorization"] = header


def build_ssl_context(
    trusted_certs: List[str],
    skip_verify: bool = False
) -> Union[ssl.SSLContext, bool]:
    """
    Build TLS verification settings for httpx.

    Args:
        trusted_certs: PEM files to trust instead of the system roots
        skip_verify: Disable peer verification entirely

    Returns:
        False when verification is skipped, True for system defaults,
        otherwise an SSLContext trusting only the given certificates

    Raises:
        ConfigurationError: If a certificate file cannot be read or parsed
    """
    if skip_verify:
        return False
    if not trusted_certs:
        return True

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    for cert_file in trusted_certs:
        try:
            context.load_verify_locations(cafile=cert_file)
        except FileNotFoundError as e:
            raise ConfigurationError(f"x509 certificate pool error: {cert_file}: {e}") from e
        except (ssl.SSLError, OSError) as e:
            raise ConfigurationError(f"Error parsing .pem file {cert_file}: {e}") from e
    return context


def build_http_client(
    config: AuthConfig,
    timeout: float,
    credentials: Credentials = NO_CREDENTIALS,
    transport: Optional[httpx.BaseTransport] = None,
    logger: logging.Logger = None
) -> httpx.Client:
    """
    Create an httpx client that signs every request and redirect hop.

    Args:
        config: TLS and authentication settings
        timeout: Seconds used for connect, read, write and pool timeouts
        credentials: Resolved credentials to attach
        transport: Optional transport override (tests)
        logger: Optional logger instance

    Returns:
        httpx.Client: Configured client

    Raises:
        ConfigurationError: If trusted certificates are invalid
    """
    logger = logger or logging.getLogger(__name__)
    verify = build_ssl_context(config.trusted_certs, config.skip_ssl_verify)
    if verify is False:
        logger.warning("TLS certificate verification is disabled")

    return httpx.Client(
        verify=verify,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        event_hooks={"request": [RequestSigner(credentials)]},
        transport=transport,
    )
