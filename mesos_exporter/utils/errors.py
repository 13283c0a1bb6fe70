"""Exception types raised by the exporter."""

from typing import Iterable


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(ExporterError):
    """Invalid startup configuration. Always fatal."""


class LeaderNotFoundError(ExporterError):
    """No candidate master confirmed itself as the current leader."""

    def __init__(self, message: str = "Unable to find leader"):
        super().__init__(message)


class SnapshotError(ExporterError):
    """A fetched document could not be decoded into the expected shape."""


class CredentialError(ExporterError):
    """Private key material could not be loaded or exchanged for a token."""


class MissingFieldsError(ExporterError):
    """Fields required by an extractor are absent from the document."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Couldn't find key(s) in document: {', '.join(self.fields)}")
