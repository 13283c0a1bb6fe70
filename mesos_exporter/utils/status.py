"""Extraction and credential status enumerations."""

from enum import Enum


class ExtractionStatus(Enum):
    """Outcome of running one extractor against a scraped document."""

    OK = "ok"
    MISSING_FIELDS = "missing_fields"
    FAILED = "failed"

    @property
    def is_error(self) -> bool:
        """
        Whether this outcome counts as an internal collector error.

        Returns:
            bool: True for every status except OK
        """
        return self is not ExtractionStatus.OK


class CredentialMode(Enum):
    """Authentication mode used against Mesos endpoints."""

    NONE = "none"
    BASIC = "basic"
    STRICT = "strict"
