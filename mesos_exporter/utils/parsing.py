"""Small parsers shared by configuration and collectors."""

import json
import re
from typing import Dict, List
from urllib.parse import urlsplit

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)')

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def csv_to_list(value: str) -> List[str]:
    """
    Split a comma-separated string into entries, dropping all spaces.

    Args:
        value: Comma-separated input, e.g. "a, b,c"

    Returns:
        List[str]: Entries in input order; empty list for an empty string
    """
    if not value:
        return []
    return value.replace(" ", "").split(",")


def parse_key_values(value: str) -> Dict[str, str]:
    """
    Parse "key=value,key2=value2" into a dict.

    Raises:
        ValueError: If an entry has no '=' separator
    """
    pairs = {}
    for entry in csv_to_list(value):
        if not entry:
            continue
        key, sep, val = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid key=value entry: {entry!r}")
        pairs[key] = val
    return pairs


def parse_labels(value: str) -> Dict[str, str]:
    """
    Parse target labels given as "key=value,..." or as a JSON object body.

    The JSON form is the inside of an object, e.g. '"env": "prod"', with or
    without the surrounding braces.

    Raises:
        ValueError: If the JSON form is malformed or a key=value entry is invalid
    """
    text = value.strip()
    if not text.startswith(("{", "\"")):
        return parse_key_values(text)

    if not text.startswith("{"):
        text = "{" + text + "}"
    labels = json.loads(text)
    if not isinstance(labels, dict):
        raise ValueError(f"Labels must be a JSON object: {value!r}")
    return {str(key): str(val) for key, val in labels.items()}


def parse_duration(value: str) -> float:
    """
    Parse a Go-style duration ("10s", "1m30s", "500ms") into seconds.

    A bare number is taken as seconds.

    Args:
        value: Duration string

    Returns:
        float: Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("Empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total


def host_port(url: str) -> str:
    """Return the "host:port" part of a URL, e.g. "10.0.0.1:5050"."""
    return urlsplit(url).netloc


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and an absolute path without doubling slashes."""
    return base_url.rstrip("/") + path


def sanitize_label_name(name: str) -> str:
    """
    Turn an arbitrary Mesos label or attribute key into a Prometheus label name.

    Args:
        name: Raw key, e.g. "rack-id" or "1zone"

    Returns:
        str: Valid label name, e.g. "rack_id", "_1zone" or "_meta" for "__meta"
    """
    sanitized = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if not sanitized or sanitized[0].isdigit():
        sanitized = "_" + sanitized
    # "__" prefixes are reserved for Prometheus internal labels
    if sanitized.startswith("__"):
        sanitized = "_" + sanitized.lstrip("_")
    return sanitized
