"""Domain models for file-mounted secrets."""
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SecretEntry:
    """A qualifying file found while scanning the secrets directory."""
    filename: str
    key: str
    location: str  # file:// URI


@dataclass(frozen=True)
class SecretsFileSettings:
    """Where to look for secret files and how their names are split."""
    base_dir: Path
    separator: str
