"""Pydantic configuration models for the Mesos exporter."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Tuple

from ..utils.logger import LOG_LEVELS
from ..utils.parsing import csv_to_list, parse_duration, parse_labels

DEFAULT_LOGIN_URL = "https://leader.mesos/acs/api/v1/auth/login"


def _validate_url(v: str) -> str:
    if v and not v.startswith(('http://', 'https://')):
        raise ValueError('URL must start with http:// or https://')
    return v


class ServiceAccountSecret(BaseModel):
    """Inline service-account secret used as the strict-mode private key."""
    uid: str
    login_endpoint: str
    private_key: str
    scheme: str = "RS256"


class AuthConfig(BaseModel):
    """Credentials and TLS settings for requests to Mesos endpoints."""
    username: str = ""
    password: str = ""
    strict_mode: bool = False
    login_url: str = DEFAULT_LOGIN_URL
    # File path or inline ServiceAccountSecret JSON
    private_key: str = ""
    skip_ssl_verify: bool = False
    trusted_certs: List[str] = Field(default_factory=list)

    @field_validator('trusted_certs', mode='before')
    @classmethod
    def split_certs(cls, v):
        """Accept a comma-separated string of PEM file paths."""
        if isinstance(v, str):
            return csv_to_list(v)
        return v

    @field_validator('login_url')
    @classmethod
    def validate_login_url(cls, v: str) -> str:
        return _validate_url(v)


class DiscoveryConfig(BaseModel):
    """Service-discovery target rendering."""
    companion_port: str = "8888"
    labels: Dict[str, str] = Field(default_factory=dict)

    @field_validator('labels', mode='before')
    @classmethod
    def split_labels(cls, v):
        """Accept "key=value,key2=value2" or a JSON object body such as '"env": "prod"'."""
        if isinstance(v, str):
            return parse_labels(v)
        return v

    @field_validator('companion_port', mode='before')
    @classmethod
    def port_as_string(cls, v):
        return str(v)


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter process."""
    addr: str = ":9105"
    master_url: str = ""
    slave_url: str = ""
    timeout: float = Field(default=10.0, gt=0)  # seconds
    exported_task_labels: List[str] = Field(default_factory=list)
    exported_slave_attributes: List[str] = Field(default_factory=list)
    log_level: str = "error"
    auth: AuthConfig = Field(default_factory=AuthConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)

    @field_validator('timeout', mode='before')
    @classmethod
    def parse_timeout(cls, v):
        """Accept Go-style durations such as "10s" or "1m30s"."""
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator('exported_task_labels', 'exported_slave_attributes', mode='before')
    @classmethod
    def split_csv(cls, v):
        if isinstance(v, str):
            return csv_to_list(v)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.lower() not in LOG_LEVELS:
            raise ValueError(f'invalid logging level: {v}')
        return v.lower()

    @field_validator('master_url', 'slave_url')
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Validate every comma-separated candidate URL."""
        for url in csv_to_list(v):
            _validate_url(url)
        return v

    @field_validator('addr')
    @classmethod
    def validate_addr(cls, v: str) -> str:
        host, sep, port = v.rpartition(':')
        if not sep or not port.isdigit():
            raise ValueError('Listen address must be "[host]:port"')
        return v

    @model_validator(mode='after')
    def exactly_one_target(self) -> 'ExporterConfig':
        """Only one of master or slave URL can be given, and one is required."""
        if self.master_url and self.slave_url:
            raise ValueError('Only -master or -slave can be given at a time')
        if not self.master_url and not self.slave_url:
            raise ValueError('Either -master or -slave is required')
        return self

    @property
    def is_master(self) -> bool:
        return bool(self.master_url)

    @property
    def listen_address(self) -> Tuple[str, int]:
        """Split addr into (host, port); an empty host listens on all interfaces."""
        host, _, port = self.addr.rpartition(':')
        return host or "0.0.0.0", int(port)
