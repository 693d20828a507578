"""Workflow for loading file-mounted secrets into a property source chain."""
import logging
from typing import Dict, Optional

from ..domains.config_loader import resolve_settings
from ..domains.index_builder import build_property_index
from ..domains.property_sources import (
    SECRET_PROPERTIES_PROPERTY_SOURCE_NAME,
    PropertySourceChain,
    merge,
)
from ..domains.resource_reader import read_secrets

logger = logging.getLogger(__name__)


def load_secret_properties(sources: PropertySourceChain) -> Dict[str, str]:
    """
    Index the secrets directory, read every secret and merge it into the chain.

    Args:
        sources: Property source chain; provides the settings and receives the secrets

    Returns:
        Secret properties read during this pass, key -> value

    Behavior:
        - Base directory and separator come from the chain itself
        - A missing secrets directory loads nothing and leaves the chain untouched
        - Secrets from earlier passes stay in secretProperties unless overwritten
        - Listing or read failures propagate, nothing is merged in that case
    """
    settings = resolve_settings(sources)
    index = build_property_index(settings)
    values = read_secrets(index)
    merge(values, sources)

    if values:
        logger.info(f"Loaded {len(values)} secret(s) from {settings.base_dir}")
    return values


def get_secret(key: str, sources: PropertySourceChain) -> Optional[str]:
    """
    Look up a secret property in the chain's secretProperties source.

    Args:
        key: Normalized property key, e.g. 'spring.datasource.password'
        sources: Property source chain

    Returns:
        Secret value, or None if no secret with that key was loaded
    """
    property_source = sources.get(SECRET_PROPERTIES_PROPERTY_SOURCE_NAME)
    if property_source is None:
        return None
    return property_source.get_property(key)
