"""
Tests for alias persistence (dvm_helper/aliases.py).
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from dvm_helper.aliases import AliasStore
from dvm_helper.common import DvmRuntimeError, InvalidArgument


@pytest.fixture
def installed():
    return {"1.10.0", "1.9.1"}


@pytest.fixture
def store(config, installed):
    return AliasStore(config, lambda version: version in installed)


class TestCreate:
    """Tests for AliasStore.create."""

    def test_create_alias(self, store, config):
        """Test alias file holds the version."""
        store.create("latest", "1.10.0")

        with open(config.alias_path("latest")) as f:
            assert f.read() == "1.10.0"
        assert store.get("latest") == "1.10.0"
        assert store.exists("latest") is True

    @pytest.mark.parametrize("alias,version", [("", "1.10.0"), ("latest", ""), ("", "")])
    def test_create_requires_both(self, store, alias, version):
        """Test missing alias name or version is an invalid argument."""
        with pytest.raises(InvalidArgument, match="both an alias name and a version"):
            store.create(alias, version)

    def test_create_uninstalled_version(self, store, config):
        """Test aliasing a version that is not installed fails."""
        with pytest.raises(InvalidArgument, match="1.8.3, is not installed"):
            store.create("old", "1.8.3")
        assert not store.exists("old")

    def test_overwrite(self, store, caplog):
        """Test existing alias is overwritten with a debug notice."""
        store.create("prod", "1.9.1")
        with caplog.at_level(logging.DEBUG):
            store.create("prod", "1.10.0")

        assert store.get("prod") == "1.10.0"
        assert "Overwriting existing alias." in caplog.text

    @pytest.mark.parametrize("alias,version", [
        (".", "1.10.0"),
        ("..", "1.10.0"),
        ("../escape", "1.10.0"),
        ("prod", ".."),
        ("prod", "../../alias"),
    ])
    def test_create_rejects_path_tokens(self, config, alias, version):
        """Test alias names and targets must be single directory entries."""
        store = AliasStore(config, lambda version: True)
        with pytest.raises(InvalidArgument, match="Invalid (alias|version) name"):
            store.create(alias, version)
        assert store.list() == {}

    def test_write_failure(self, store):
        """Test I/O failure is a runtime error."""
        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(DvmRuntimeError, match="Unable to write alias"):
                store.create("prod", "1.10.0")


class TestRemove:
    """Tests for AliasStore.remove."""

    def test_remove_alias(self, store, config):
        """Test alias file is deleted."""
        store.create("prod", "1.10.0")
        store.remove("prod")
        assert not store.exists("prod")

    def test_remove_requires_name(self, store):
        """Test empty alias name is an invalid argument."""
        with pytest.raises(InvalidArgument):
            store.remove("")

    def test_remove_missing_alias_warns(self, store, caplog):
        """Test removing an unknown alias only warns."""
        store.remove("ghost")
        assert "ghost is not an alias." in caplog.text
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    @pytest.mark.parametrize("alias", [".", "..", "../config.yml"])
    def test_remove_rejects_path_tokens(self, store, config, alias):
        """Test unalias never deletes outside the alias directory."""
        store.create("prod", "1.10.0")
        Path(config.dvm_dir, "config.yml").write_text("timeout_seconds: 10\n")

        with pytest.raises(InvalidArgument, match="Invalid alias name"):
            store.remove(alias)

        assert store.get("prod") == "1.10.0"
        assert Path(config.dvm_dir, "config.yml").exists()

    def test_remove_failure(self, store):
        """Test I/O failure is a runtime error."""
        store.create("prod", "1.10.0")
        with patch("dvm_helper.aliases.os.remove", side_effect=PermissionError("denied")):
            with pytest.raises(DvmRuntimeError, match="Unable to remove alias prod"):
                store.remove("prod")


class TestList:
    """Tests for AliasStore.list."""

    def test_list_empty(self, store):
        """Test no alias directory yields an empty mapping."""
        assert store.list() == {}

    def test_list_sorted(self, store):
        """Test aliases are listed by name."""
        store.create("stable", "1.9.1")
        store.create("edge", "1.10.0")
        assert list(store.list().items()) == [("edge", "1.10.0"), ("stable", "1.9.1")]

    def test_list_skips_unreadable(self, store, config):
        """Test unreadable records are skipped, not fatal."""
        store.create("good", "1.10.0")
        with open(config.alias_path("broken"), "wb") as f:
            f.write(b"\xff\xfe\xfa")

        assert store.list() == {"good": "1.10.0"}

    def test_list_ignores_directories(self, store, config):
        """Test stray directories are not aliases."""
        store.create("good", "1.10.0")
        (Path(config.alias_dir) / "subdir").mkdir()
        assert store.list() == {"good": "1.10.0"}

    def test_get_unknown(self, store):
        """Test get returns None for unknown aliases."""
        assert store.get("nope") is None

    def test_get_undecodable(self, store, config):
        """Test a record that is not text is a runtime error."""
        store.create("good", "1.10.0")
        with open(config.alias_path("bad"), "wb") as f:
            f.write(b"\xff\xfe")

        with pytest.raises(DvmRuntimeError, match="Unable to read alias bad"):
            store.get("bad")

    def test_get_path_token(self, store):
        """Test path-like names are never looked up as aliases."""
        assert store.get("..") is None
        assert store.exists("../alias/good") is False
