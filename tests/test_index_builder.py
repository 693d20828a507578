"""Tests for filename normalization and the secrets directory index."""
import logging
import os
from pathlib import Path

import pytest

from docker_secrets.secrets.domains.index_builder import (
    SecretsDirectoryError,
    build_property_index,
    scan_secret_entries,
)
from docker_secrets.secrets.domains.models import SecretEntry, SecretsFileSettings
from docker_secrets.secrets.domains.naming import collect_index, is_ambiguous, to_property_key


class TestNaming:
    """Pure filename rules."""

    def test_default_separator_never_ambiguous(self):
        assert not is_ambiguous("spring.datasource.password", ".")
        assert not is_ambiguous("plain", ".")

    def test_default_separator_in_name_is_ambiguous_with_custom_separator(self):
        assert is_ambiguous("x.y", "_")
        assert is_ambiguous("db_password.txt", "_")

    def test_leading_dot_is_not_ambiguous(self):
        """Hidden files only have the dot in first position."""
        assert not is_ambiguous(".hidden", "_")
        assert is_ambiguous(".hidden.file", "_")

    def test_plain_name_not_ambiguous_with_custom_separator(self):
        assert not is_ambiguous("plain", "_")
        assert not is_ambiguous("DB_PASSWORD", "_")

    def test_to_property_key_replaces_separator_and_lowercases(self):
        assert to_property_key("SPRING_DATASOURCE_PASSWORD", "_") == "spring.datasource.password"
        assert to_property_key("Spring.Datasource.Username", ".") == "spring.datasource.username"

    def test_to_property_key_leaves_other_characters(self):
        assert to_property_key("api-key_v2", ".") == "api-key_v2"
        assert to_property_key("a--b--c", "-") == "a..b..c"

    def test_to_property_key_lowercases_beyond_ascii(self):
        """Case folding covers the full Unicode range, not only ASCII."""
        assert to_property_key("ÄPI_KEY", "_") == "äpi.key"
        assert to_property_key("İD", ".") == "i\u0307d"

    def test_collect_index_first_entry_wins(self, caplog):
        caplog.set_level(logging.WARNING)
        entries = [
            SecretEntry("A_B", "a.b", "file:///secrets/A_B"),
            SecretEntry("a_b", "a.b", "file:///secrets/a_b"),
            SecretEntry("c", "c", "file:///secrets/c"),
        ]

        index = collect_index(entries)

        assert index == {"a.b": "file:///secrets/A_B", "c": "file:///secrets/c"}
        assert "Encountered duplicates" in caplog.text
        assert "file:///secrets/a_b will be ignored" in caplog.text
        assert "Reading content of file:///secrets/A_B" in caplog.text

    def test_collect_index_empty(self):
        assert collect_index([]) == {}


class TestBuildPropertyIndex:
    """Directory scanning."""

    def test_nonexistent_directory_gives_empty_index(self, tmp_path):
        settings = SecretsFileSettings(base_dir=tmp_path / "missing", separator=".")

        index = build_property_index(settings)

        assert len(index) == 0

    def test_base_dir_is_a_file_gives_empty_index(self, tmp_path, write_secret):
        not_a_dir = write_secret(tmp_path, "not-a-dir")
        settings = SecretsFileSettings(base_dir=not_a_dir, separator=".")

        assert len(build_property_index(settings)) == 0

    def test_empty_directory_gives_empty_index(self, secrets_dir):
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        assert dict(build_property_index(settings)) == {}

    def test_index_maps_key_to_file_uri(self, secrets_dir, write_secret):
        secret = write_secret(secrets_dir, "spring.datasource.password")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        index = build_property_index(settings)

        assert dict(index) == {"spring.datasource.password": secret.absolute().as_uri()}
        assert index["spring.datasource.password"].startswith("file://")

    def test_custom_separator(self, secrets_dir, write_secret):
        write_secret(secrets_dir, "SPRING_DATASOURCE_USERNAME")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator="_")

        assert list(build_property_index(settings)) == ["spring.datasource.username"]

    def test_subdirectories_are_not_scanned(self, secrets_dir, write_secret):
        nested = secrets_dir / "nested"
        nested.mkdir()
        write_secret(nested, "inner")
        write_secret(secrets_dir, "outer")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        assert list(build_property_index(settings)) == ["outer"]

    def test_symlink_to_file_is_included_symlink_to_directory_is_not(self, secrets_dir, tmp_path, write_secret):
        """Kubernetes mounts secrets as symlinks into a '..data' directory link."""
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        target = write_secret(data_dir, "token")
        os.symlink(data_dir, secrets_dir / "..data")
        os.symlink(target, secrets_dir / "token")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        assert list(build_property_index(settings)) == ["token"]

    def test_ambiguous_file_skipped_with_custom_separator(self, secrets_dir, write_secret, caplog):
        caplog.set_level(logging.WARNING)
        write_secret(secrets_dir, "x.y")
        write_secret(secrets_dir, "plain")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator="_")

        index = build_property_index(settings)

        assert list(index) == ["plain"]
        assert "Skipping ambiguous file" in caplog.text
        assert str((secrets_dir / "x.y").absolute()) in caplog.text
        assert "separator '_'" in caplog.text

    def test_dotted_and_separated_names_leave_exactly_one_key(self, secrets_dir, write_secret, caplog):
        caplog.set_level(logging.WARNING)
        write_secret(secrets_dir, "a.b")
        write_secret(secrets_dir, "a_b")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator="_")

        index = build_property_index(settings)

        assert list(index) == ["a.b"]
        assert caplog.records

    def test_collision_keeps_exactly_one(self, secrets_dir, write_secret, caplog):
        caplog.set_level(logging.WARNING)
        upper = write_secret(secrets_dir, "A_B")
        lower = write_secret(secrets_dir, "a_b")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator="_")

        index = build_property_index(settings)

        assert list(index) == ["a.b"]
        assert index["a.b"] in {upper.absolute().as_uri(), lower.absolute().as_uri()}
        assert "Encountered duplicates" in caplog.text

    def test_collision_with_default_separator(self, secrets_dir, write_secret, caplog):
        caplog.set_level(logging.WARNING)
        write_secret(secrets_dir, "Db.Password")
        write_secret(secrets_dir, "db.password")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        index = build_property_index(settings)

        assert list(index) == ["db.password"]
        assert len(caplog.records) == 1

    def test_index_is_read_only(self, secrets_dir, write_secret):
        write_secret(secrets_dir, "a")
        index = build_property_index(SecretsFileSettings(base_dir=secrets_dir, separator="."))

        with pytest.raises(TypeError):
            index["b"] = "file:///b"

    def test_listing_failure_propagates(self, secrets_dir, monkeypatch):
        def failing_iterdir(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "iterdir", failing_iterdir)
        settings = SecretsFileSettings(base_dir=secrets_dir, separator=".")

        with pytest.raises(SecretsDirectoryError) as exc_info:
            build_property_index(settings)

        assert "Permission denied" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_scan_yields_entries(self, secrets_dir, write_secret):
        secret = write_secret(secrets_dir, "API_KEY")
        settings = SecretsFileSettings(base_dir=secrets_dir, separator="_")

        entries = list(scan_secret_entries(settings))

        assert entries == [SecretEntry("API_KEY", "api.key", secret.absolute().as_uri())]
