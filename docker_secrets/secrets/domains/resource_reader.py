"""Read secret values from the locations recorded in a property index."""
import logging
import os
from pathlib import Path
from typing import Dict, Mapping
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

logger = logging.getLogger(__name__)


class SecretReadError(Exception):
    """A secret location could not be read."""
    pass


def location_to_path(location: str) -> Path:
    """
    Convert a file:// URI into a local path.

    The percent-encoded bytes are decoded with the filesystem encoding, so
    names that are not valid UTF-8 map back to the same file.

    Raises:
        SecretReadError: If the URI scheme is not 'file'
    """
    parsed = urlparse(location)
    if parsed.scheme != "file":
        raise SecretReadError(f"Unsupported secret location: {location}")
    if os.name == "nt":
        return Path(url2pathname(parsed.path))
    return Path(os.fsdecode(unquote_to_bytes(parsed.path)))


def read_secret(location: str) -> str:
    """
    Read one secret value.

    Trailing line breaks (as added by editors or 'echo') are stripped, any
    other whitespace is part of the value.

    Args:
        location: file:// URI of the secret file

    Returns:
        Secret value as string

    Raises:
        SecretReadError: If the file can't be read
    """
    path = location_to_path(location)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SecretReadError(f"Failed to read secret file {path}: {e}") from e
    return content.rstrip("\r\n")


def read_secrets(index: Mapping[str, str]) -> Dict[str, str]:
    """
    Resolve every location in a property index to its value.

    Args:
        index: Property key -> file URI

    Returns:
        Property key -> secret value
    """
    values = {}
    for key, location in index.items():
        values[key] = read_secret(location)
        logger.debug(f"Read secret property '{key}' from {location}")
    return values
