"""Credential resolution: none, basic, or strict-mode service account login."""

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import httpx
import jwt
from pydantic import ValidationError

from ..config.models import AuthConfig, ServiceAccountSecret
from ..utils.errors import CredentialError
from ..utils.metrics import ErrorCounter
from ..utils.status import CredentialMode

# Lifetime of the login JWT presented to the login endpoint
LOGIN_TOKEN_TTL_SECONDS = 5 * 60
LOGIN_TOKEN_ALGORITHM = "RS256"


@dataclass(frozen=True)
class NoCredentials:
    mode = CredentialMode.NONE


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str
    mode = CredentialMode.BASIC


@dataclass(frozen=True)
class StrictCredentials:
    """Service-account identity and the session token obtained at login."""
    uid: str
    login_url: str
    token: Optional[str] = None
    mode = CredentialMode.STRICT


Credentials = Union[NoCredentials, BasicCredentials, StrictCredentials]

NO_CREDENTIALS = NoCredentials()


class CredentialResolver:
    """
    Resolve configured authentication into an immutable Credentials value.

    Resolution happens once at startup. Strict-mode failures (unreadable or
    malformed key, failed login) are logged and counted on the error counter
    but never raised: the exporter starts with an empty token and requests
    then fail authentication one scrape at a time.
    """

    def __init__(
        self,
        config: AuthConfig,
        client: httpx.Client,
        error_counter: ErrorCounter,
        logger: logging.Logger = None
    ):
        """
        Initialize credential resolver.

        Args:
            config: Authentication configuration
            client: Unauthenticated client used for the login request
            error_counter: Process-wide internal error counter
            logger: Optional logger instance
        """
        self.config = config
        self.client = client
        self.error_counter = error_counter
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)

    def resolve(self) -> Credentials:
        """
        Pick the credential mode and, in strict mode, log in.

        Returns:
            Credentials: Strict when strict mode is enabled, basic when both
            username and password are set, otherwise none
        """
        if self.config.strict_mode:
            return self._resolve_strict()

        if self.config.username and self.config.password:
            self.logger.debug("Using basic authentication", extra={"username": self.config.username})
            return BasicCredentials(self.config.username, self.config.password)

        return NO_CREDENTIALS

    def _resolve_strict(self) -> StrictCredentials:
        uid = self.config.username
        login_url = self.config.login_url

        try:
            key, uid, login_url = self.load_private_key()
            token = self.login(uid, key, login_url)
        except CredentialError as e:
            self.logger.error(f"Strict mode authentication failed: {e}", extra={"uid": uid})
            self.error_counter.inc()
            return StrictCredentials(uid=uid, login_url=login_url)

        self.logger.info("Strict mode login succeeded", extra={"uid": uid, "login_url": login_url})
        return StrictCredentials(uid=uid, login_url=login_url, token=token)

    def load_private_key(self) -> Tuple[bytes, str, str]:
        """
        Load private key material from a file path or an inline secret.

        A value naming an existing file is read as the PEM key; anything else
        is decoded as service-account secret JSON whose uid and login
        endpoint override the configured username and login URL.

        Returns:
            Tuple of (pem_key, uid, login_url)

        Raises:
            CredentialError: If the file cannot be read, the secret is malformed
                or it names a signing scheme other than RS256
        """
        value = self.config.private_key

        if value and os.path.exists(value):
            abs_path = Path(value).resolve()
            try:
                key = abs_path.read_bytes()
            except OSError as e:
                raise CredentialError(f"Error reading private key {abs_path}: {e}") from e
            return key, self.config.username, self.config.login_url

        try:
            secret = ServiceAccountSecret(**json.loads(value))
        except (ValueError, TypeError, ValidationError) as e:
            raise CredentialError(f"Error decoding private key: {e}") from e

        if secret.scheme != LOGIN_TOKEN_ALGORITHM:
            raise CredentialError(
                f"Unsupported service account scheme {secret.scheme!r}, expected {LOGIN_TOKEN_ALGORITHM}"
            )

        return secret.private_key.encode(), secret.uid, secret.login_endpoint

    def login(self, uid: str, key: bytes, login_url: str) -> str:
        """
        Exchange a JWT signed with the private key for a session token.

        Args:
            uid: Service account id
            key: PEM-encoded RSA private key
            login_url: Login endpoint URL

        Returns:
            str: Session token

        Raises:
            CredentialError: If signing, the request, or the response fails
        """
        try:
            login_token = jwt.encode(
                {"uid": uid, "exp": int(time.time()) + LOGIN_TOKEN_TTL_SECONDS},
                key,
                algorithm=LOGIN_TOKEN_ALGORITHM,
            )
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise CredentialError(f"Error signing login token: {e}") from e

        try:
            response = self.client.post(login_url, json={"uid": uid, "token": login_token})
            response.raise_for_status()
            token = response.json()["token"]
        except httpx.HTTPError as e:
            raise CredentialError(f"Login request to {login_url} failed: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialError(f"Unexpected login response from {login_url}: {e}") from e

        return token
