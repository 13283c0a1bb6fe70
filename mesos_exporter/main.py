"""Main application entry point for the Mesos exporter."""

import argparse
import logging
import sys
from typing import List, Optional

import httpx
import uvicorn
from prometheus_client import CollectorRegistry

from .collectors.base import MetricCollector
from .collectors.master_collector import MasterCollector
from .collectors.monitor_collector import SlaveMonitorCollector
from .collectors.slave_collector import SlaveCollector
from .collectors.state_collector import MasterStateCollector, SlaveStateCollector
from .config.loader import ConfigLoader
from .config.models import DEFAULT_LOGIN_URL, ExporterConfig
from .server import create_app
from .services.auth import CredentialResolver, NO_CREDENTIALS
from .services.discovery import ServiceDiscovery
from .services.leader import LeaderResolver
from .services.snapshot import SnapshotFetcher
from .services.transport import build_http_client
from .utils.errors import ConfigurationError
from .utils.logger import setup_logger
from .utils.metrics import ErrorCounter


class ExporterApp:
    """
    Process assembly.

    Owns the Prometheus registry, the error counter, the authenticated HTTP
    client and every collector, and wires them into the HTTP surface.
    """

    def __init__(
        self,
        config: ExporterConfig,
        logger: logging.Logger = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize exporter application.

        Args:
            config: Validated exporter configuration
            logger: Optional logger instance
            transport: Optional httpx transport override (tests)

        Raises:
            ConfigurationError: If TLS settings are invalid or a collector
                cannot be registered
        """
        self.config = config
        self.logger = logger or setup_logger("mesos_exporter", config.log_level)

        self.registry = CollectorRegistry()
        self.error_counter = ErrorCounter(self.registry)

        login_client = build_http_client(
            config.auth, config.timeout, NO_CREDENTIALS, transport, self.logger
        )
        try:
            credentials = CredentialResolver(
                config.auth, login_client, self.error_counter, self.logger
            ).resolve()
        finally:
            login_client.close()
        self.logger.info(f"Using {credentials.mode.value} authentication")

        self.client = build_http_client(
            config.auth, config.timeout, credentials, transport, self.logger
        )
        self.fetcher = SnapshotFetcher(self.client, self.logger)
        self.resolver = LeaderResolver(self.fetcher, self.logger)

        self.collectors = self._build_collectors()
        for collector in self.collectors:
            try:
                self.registry.register(collector)
            except ValueError as e:
                raise ConfigurationError(f"Prometheus Register() error: {e}") from e

        self.discovery = ServiceDiscovery(
            config.master_url, self.fetcher, config.discovery, self.logger
        )
        self.api = create_app(self.registry, self.discovery)

    def _build_collectors(self) -> List[MetricCollector]:
        config = self.config
        common = (self.fetcher, self.resolver, self.error_counter, self.logger)

        if config.is_master:
            self.logger.info("Exposing master metrics", extra={"address": config.addr})
            return [
                MasterCollector(config.master_url, *common),
                MasterStateCollector(
                    config.master_url, *common,
                    slave_attributes=config.exported_slave_attributes
                ),
            ]

        self.logger.info("Exposing slave metrics", extra={"address": config.addr})
        return [
            SlaveCollector(config.slave_url, *common),
            SlaveMonitorCollector(config.slave_url, *common),
            SlaveStateCollector(
                config.slave_url, *common,
                task_labels=config.exported_task_labels,
                slave_attributes=config.exported_slave_attributes
            ),
        ]

    def serve(self) -> None:
        """Listen and serve until interrupted."""
        host, port = self.config.listen_address
        self.logger.info("Listening and serving ...", extra={"host": host, "port": port})
        try:
            uvicorn.run(self.api, host=host, port=port, log_level="warning")
        finally:
            self.client.close()


def build_parser() -> argparse.ArgumentParser:
    """Command-line flags. Unset flags stay None so file and env values apply."""
    parser = argparse.ArgumentParser(
        prog='mesos-exporter',
        description='Prometheus exporter for Mesos masters and agents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Master cluster with leader discovery
  mesos-exporter --master http://m1:5050,http://m2:5050,http://m3:5050

  # Single agent
  mesos-exporter --slave http://localhost:5051 --exported-task-labels app,team

  # DC/OS strict mode with a service account secret
  MESOS_EXPORTER_PRIVATE_KEY="$(cat secret.json)" mesos-exporter --master https://leader.mesos --strict-mode
        """
    )

    parser.add_argument('--config', help='Optional YAML configuration file')
    parser.add_argument('--addr', help='Address to listen on (default: :9105)')
    parser.add_argument('--master', help='Expose metrics from master running on this URL (comma-separated for leader discovery)')
    parser.add_argument('--slave', help='Expose metrics from slave running on this URL')
    parser.add_argument('--timeout', help='Master polling timeout, e.g. 10s (default: 10s)')
    parser.add_argument('--exported-task-labels', help='Comma-separated list of task labels to include in the corresponding metric')
    parser.add_argument('--exported-slave-attributes', help='Comma-separated list of slave attributes to include in the corresponding metric')
    parser.add_argument('--trusted-certs', help='Comma-separated list of certificates (.pem files) trusted for requests to Mesos endpoints')
    parser.add_argument('--strict-mode', action='store_true', help='Use strict mode authentication')
    parser.add_argument('--username', help='Username for authentication (env: MESOS_EXPORTER_USERNAME)')
    parser.add_argument('--password', help='Password for authentication (env: MESOS_EXPORTER_PASSWORD)')
    parser.add_argument('--login-url', help=f'URL for strict mode authentication (default: {DEFAULT_LOGIN_URL})')
    parser.add_argument('--private-key', help='File path or secret JSON for strict mode authentication (env: MESOS_EXPORTER_PRIVATE_KEY)')
    parser.add_argument('--skip-ssl-verify', action='store_true', help='Skip SSL certificate verification')
    parser.add_argument('--sd-port', help='Port appended to every discovered agent (env: CADVISOR_PORT, default: 8888)')
    parser.add_argument('--sd-labels', help='Labels for discovered targets as key=value,... or a JSON object body such as \'"env": "prod"\' (env: LABELS)')
    parser.add_argument('--log-level', help='Log level: panic, fatal, error, warn, info, debug, trace (env: LOG_LEVEL, default: error)')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point.

    Configuration errors are fatal: they are logged and the process exits 1.
    """
    args = build_parser().parse_args(argv)
    logger = setup_logger("mesos_exporter", "error")

    try:
        config = ConfigLoader.from_args(args)
    except Exception as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    logger = setup_logger("mesos_exporter", config.log_level)
    if config.log_level != "error":
        logger.info("Changing log level", extra={"logLevel": config.log_level})

    try:
        app = ExporterApp(config, logger)
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    app.serve()


if __name__ == '__main__':
    main()
