"""Filename to property key rules.

These functions never touch the filesystem. The index builder feeds them
filenames and the entries it derives from them.
"""
import logging
from typing import Dict, Iterable

from .models import SecretEntry

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "."


def is_ambiguous(filename: str, separator: str) -> bool:
    """
    Check whether a filename can't be mapped unambiguously with the given separator.

    With a custom separator, a filename that also contains the default
    separator would collapse both into '.' and collide with other files.
    A leading dot (hidden file) does not count.

    Args:
        filename: Bare filename, no directory part
        separator: Configured separator character

    Returns:
        True if the file has to be skipped
    """
    if separator == DEFAULT_SEPARATOR:
        return False
    return filename.rfind(DEFAULT_SEPARATOR) > 0


def to_property_key(filename: str, separator: str) -> str:
    """
    Convert a filename into a normalized property key.

    'SPRING_DATASOURCE_PASSWORD' with separator '_' becomes
    'spring.datasource.password'. Other characters are left alone.

    Lower-casing is str.lower(), independent of the process locale but not
    limited to ASCII: 'ÄPI' becomes 'äpi', and 'İD' becomes 'i' plus a
    combining dot above (U+0307) followed by 'd'.
    """
    return filename.replace(separator, DEFAULT_SEPARATOR).lower()


def collect_index(entries: Iterable[SecretEntry]) -> Dict[str, str]:
    """
    Build a key -> location mapping where the first entry for a key wins.

    Args:
        entries: Secret entries in discovery order

    Returns:
        Dict mapping each property key to exactly one location
    """
    index: Dict[str, str] = {}
    for entry in entries:
        existing = index.get(entry.key)
        if existing is not None:
            logger.warning(
                f"Encountered duplicates. Secret in {entry.location} will be ignored. "
                f"Reading content of {existing} instead."
            )
            continue
        index[entry.key] = entry.location
    return index
