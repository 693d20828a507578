"""Property index over the files of a secrets directory.

The file 'spring.datasource.username' adds the property key
'spring.datasource.username' with the file's URI as value. With separator
'_', 'SPRING_DATASOURCE_USERNAME' maps to the same key.
"""
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping

from .models import SecretEntry, SecretsFileSettings
from .naming import collect_index, is_ambiguous, to_property_key

logger = logging.getLogger(__name__)


class SecretsDirectoryError(Exception):
    """Secrets directory exists but can't be listed."""
    pass


def _list_files(base_dir: Path) -> List[Path]:
    """List regular files directly below base_dir, sorted by name."""
    try:
        children = sorted(base_dir.iterdir(), key=lambda path: path.name)
    except OSError as e:
        raise SecretsDirectoryError(f"Failed to list secrets directory {base_dir}: {e}") from e
    return [path for path in children if path.is_file()]


def scan_secret_entries(settings: SecretsFileSettings) -> Iterator[SecretEntry]:
    """
    Yield one entry per usable file in the secrets directory.

    Ambiguous filenames are skipped with a warning. A missing base directory
    yields nothing.

    Raises:
        SecretsDirectoryError: If the directory can't be listed
    """
    base_dir = Path(settings.base_dir)
    if not base_dir.is_dir():
        logger.debug(f"Secrets directory {base_dir} not found, no secrets loaded")
        return

    for path in _list_files(base_dir):
        if is_ambiguous(path.name, settings.separator):
            logger.warning(
                f"Skipping ambiguous file {path.absolute()}, because of separator '{settings.separator}'"
            )
            continue
        yield SecretEntry(
            filename=path.name,
            key=to_property_key(path.name, settings.separator),
            location=path.absolute().as_uri(),
        )


def build_property_index(settings: SecretsFileSettings) -> Mapping[str, str]:
    """
    Build the read-only property key -> file URI index.

    Args:
        settings: Base directory and separator

    Returns:
        Mapping of property keys to file URIs, empty if there are no secrets

    Raises:
        SecretsDirectoryError: If the directory can't be listed
    """
    index = collect_index(scan_secret_entries(settings))
    logger.debug(f"Indexed {len(index)} secret file(s) in {settings.base_dir}")
    return MappingProxyType(index)
