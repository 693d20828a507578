"""Ordered chain of named property sources and the secret properties source."""
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

COMMAND_LINE_PROPERTY_SOURCE_NAME = "commandLineArgs"
SYSTEM_ENVIRONMENT_PROPERTY_SOURCE_NAME = "systemEnvironment"
APPLICATION_CONFIG_PROPERTY_SOURCE_NAME = "applicationConfig"
SECRET_PROPERTIES_PROPERTY_SOURCE_NAME = "secretProperties"


class PropertySource:
    """A named provider of properties backed by an arbitrary source object."""

    def __init__(self, name: str, source: Any):
        self.name = name
        self.source = source

    def get_property(self, key: str) -> Optional[Any]:
        if isinstance(self.source, Mapping):
            return self.source.get(key)
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class SystemEnvironmentPropertySource(PropertySource):
    """
    Property source over environment variables.

    Dotted keys are also looked up by their environment variable form, so
    'secrets.file.base-dir' resolves SECRETS_FILE_BASE_DIR.
    """

    def __init__(self, source: Optional[Mapping] = None,
                 name: str = SYSTEM_ENVIRONMENT_PROPERTY_SOURCE_NAME):
        super().__init__(name, source if source is not None else {})

    @staticmethod
    def _candidate_names(key: str) -> List[str]:
        underscored = key.replace(".", "_").replace("-", "_")
        candidates = [key, underscored, underscored.upper()]
        # dict.fromkeys keeps order and drops duplicates
        return list(dict.fromkeys(candidates))

    def get_property(self, key: str) -> Optional[Any]:
        for candidate in self._candidate_names(key):
            value = super().get_property(candidate)
            if value is not None:
                return value
        return None


class SecretPropertiesPropertySource(PropertySource):
    """Property source holding every property derived from secret files."""

    def __init__(self, source: Dict[str, Any]):
        super().__init__(SECRET_PROPERTIES_PROPERTY_SOURCE_NAME, source)


class PropertySourceChain:
    """
    Ordered, uniquely named property sources.

    Sources earlier in the chain shadow later ones. Not thread-safe; callers
    serialize mutations.
    """

    def __init__(self, sources: Optional[List[PropertySource]] = None):
        self._sources: List[PropertySource] = []
        for source in sources or []:
            self.add_last(source)

    def __iter__(self) -> Iterator[PropertySource]:
        return iter(list(self._sources))

    def names(self) -> List[str]:
        return [source.name for source in self._sources]

    def contains(self, name: str) -> bool:
        return name in self.names()

    def get(self, name: str) -> Optional[PropertySource]:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    def _index_of(self, name: str) -> int:
        for position, source in enumerate(self._sources):
            if source.name == name:
                return position
        raise KeyError(f"Property source '{name}' does not exist")

    def _remove_if_present(self, name: str) -> None:
        self._sources = [source for source in self._sources if source.name != name]

    def add_first(self, source: PropertySource) -> None:
        self._remove_if_present(source.name)
        self._sources.insert(0, source)

    def add_last(self, source: PropertySource) -> None:
        self._remove_if_present(source.name)
        self._sources.append(source)

    def add_after(self, relative_name: str, source: PropertySource) -> None:
        """Insert source directly after the source named relative_name."""
        if relative_name == source.name:
            raise ValueError(f"Property source '{source.name}' cannot be added relative to itself")
        self._remove_if_present(source.name)
        self._sources.insert(self._index_of(relative_name) + 1, source)

    def replace(self, name: str, source: PropertySource) -> None:
        """Swap the source named name for source, keeping its position."""
        self._sources[self._index_of(name)] = source

    def get_property(self, key: str, default: Any = None) -> Any:
        for source in self._sources:
            value = source.get_property(key)
            if value is not None:
                logger.debug(f"Found key '{key}' in property source '{source.name}'")
                return value
        return default


def merge(source: Mapping, sources: PropertySourceChain) -> None:
    """
    Merge the given properties into the chain's secretProperties source.

    An existing secretProperties source keeps its entries, with the new ones
    overlaid, and stays where it is. Otherwise a new source is added right
    after the system environment, or last if the chain has none.

    Args:
        source: Resolved secret properties, key -> value
        sources: The chain to install them into
    """
    if not source:
        return

    resulting_source: Dict[str, Any] = {}
    property_source = SecretPropertiesPropertySource(resulting_source)
    if sources.contains(SECRET_PROPERTIES_PROPERTY_SOURCE_NAME):
        existing = sources.get(SECRET_PROPERTIES_PROPERTY_SOURCE_NAME).source
        if isinstance(existing, Mapping):
            resulting_source.update(existing)
        else:
            logger.debug(f"Ignoring existing {SECRET_PROPERTIES_PROPERTY_SOURCE_NAME} backed by {type(existing).__name__}")
        resulting_source.update(source)
        sources.replace(SECRET_PROPERTIES_PROPERTY_SOURCE_NAME, property_source)
    else:
        resulting_source.update(source)
        if sources.contains(SYSTEM_ENVIRONMENT_PROPERTY_SOURCE_NAME):
            sources.add_after(SYSTEM_ENVIRONMENT_PROPERTY_SOURCE_NAME, property_source)
        else:
            sources.add_last(property_source)
    logger.debug(f"{SECRET_PROPERTIES_PROPERTY_SOURCE_NAME} now holds {len(resulting_source)} key(s)")
