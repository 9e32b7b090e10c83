"""
End-to-end tests of the command façade (dvm_helper/manager.py) against
an isolated dvm directory with fake network and probe seams.
"""

import dataclasses
import os

import pytest

from dvm_helper.collectors import NetworkError
from dvm_helper.common import DvmRuntimeError, InvalidArgument, InvalidOperation
from dvm_helper.manager import DockerVersionManager

from conftest import FakeDownloader, FakeGitHubClient, FakeProbe


def _script(config):
    with open(config.output_script_path) as f:
        return f.read()


class TestInstallAndUse:
    """Tests for install, use and current."""

    def test_install_activates(self, manager, config, caplog):
        """Test a fresh install becomes the active version."""
        manager.install("1.10.0")

        assert manager.current() == "1.10.0"
        assert manager.which() == os.path.join(config.version_dir("1.10.0"), "docker")
        assert config.version_dir("1.10.0") in _script(config)
        assert "Installing 1.10.0..." in caplog.text
        assert "Now using Docker 1.10.0" in caplog.text

    def test_use_installs_missing_version(self, manager, downloader):
        """Test use downloads a version that is not installed yet."""
        manager.use("1.9.1")

        assert len(downloader.calls) == 1
        assert manager.current() == "1.9.1"

    def test_use_alias(self, manager, caplog):
        """Test an alias activates its target."""
        manager.install("1.10.0")
        manager.install("1.9.1")
        manager.alias("latest", "1.10.0")

        manager.use("latest")

        assert manager.current() == "1.10.0"
        assert "Now using Docker 1.10.0" in caplog.text

    def test_switching_keeps_one_managed_entry(self, manager, config):
        """Test repeated use never stacks managed PATH entries."""
        manager.use("1.9.1")
        manager.use("1.10.0")
        manager.use("1.9.1")

        entries = manager.activator.search_path.entries
        assert [e for e in entries if manager.activator.is_managed(e)] == [config.version_dir("1.9.1")]

    def test_use_system(self, manager, config, caplog):
        """Test 'system' removes managed entries and reports the system version."""
        manager.use("1.10.0")
        manager.use("system")

        assert manager.current() == "system (1.9.1)"
        assert config.bin_root not in _script(config)
        assert "Now using system version of Docker: 1.9.1" in caplog.text

    def test_use_experimental(self, manager):
        """Test the experimental client reports its probed version."""
        manager.install("experimental")
        assert manager.current() == "experimental (1.12.0-dev)"

    def test_use_from_environment(self, config, probe, downloader, github):
        """Test $DOCKER_VERSION is used when no version is given."""
        manager = DockerVersionManager(
            dataclasses.replace(config, docker_version="1.9.1"),
            probe=probe, downloader=downloader, client=github,
        )
        manager.use()
        assert manager.current() == "1.9.1"

    def test_use_unreadable_alias(self, manager, config):
        """Test a corrupt alias record fails with a runtime error."""
        os.makedirs(config.alias_dir)
        with open(config.alias_path("bad"), "wb") as f:
            f.write(b"\xff\xfe")

        with pytest.raises(DvmRuntimeError, match="Unable to read alias bad"):
            manager.use("bad")

    def test_use_without_version(self, manager):
        with pytest.raises(InvalidArgument):
            manager.use("")

    def test_install_unknown_version(self, manager, config):
        """Test an unpublished version changes nothing."""
        with pytest.raises(InvalidOperation):
            manager.install("1.10.0-rc1")
        assert not os.path.exists(config.output_script_path)

    def test_deactivate(self, manager, config):
        manager.use("1.10.0")
        manager.deactivate()
        assert manager.current() == "system (1.9.1)"

    def test_current_without_client(self, config, caplog, tmp_path):
        """Test N/A is reported when no client is on PATH."""
        empty = tmp_path / "empty"
        empty.mkdir()
        manager = DockerVersionManager(
            dataclasses.replace(config, path=str(empty)),
            probe=FakeProbe(), downloader=FakeDownloader(), client=FakeGitHubClient(),
        )
        assert manager.current() is None
        assert "N/A" in caplog.text


class TestUninstall:
    """Tests for uninstall through the façade."""

    def test_uninstall_active(self, manager):
        manager.install("1.10.0")
        with pytest.raises(InvalidOperation):
            manager.uninstall("1.10.0")
        assert manager.installer.is_installed("1.10.0")

    def test_uninstall_bin_root_token(self, manager):
        """Test '.' cannot remove the directory holding every install."""
        manager.install("1.10.0")
        manager.install("1.9.1")
        manager.use("system")

        with pytest.raises(InvalidArgument):
            manager.uninstall(".")

        assert manager.installer.is_installed("1.10.0")
        assert manager.installer.is_installed("1.9.1")

    def test_uninstall_inactive(self, manager):
        manager.install("1.9.1")
        manager.install("1.10.0")
        manager.uninstall("1.9.1")
        assert manager.list() == ["1.10.0", "system (1.9.1)"]


class TestListing:
    """Tests for list, list-remote and list-alias output."""

    def test_list_marks_current(self, manager, caplog):
        """Test the active version is marked with an arrow."""
        manager.install("1.9.1")
        manager.install("1.10.0")
        caplog.clear()

        assert manager.list() == ["1.10.0", "1.9.1", "system (1.9.1)"]
        lines = [r.getMessage() for r in caplog.records]
        assert "->\t1.10.0" in lines
        assert "\t1.9.1" in lines

    def test_list_prefix(self, manager):
        """Test the pattern matches version prefixes."""
        manager.install("1.9.1")
        manager.install("1.10.0")
        assert manager.list("1.9") == ["1.9.1"]
        assert manager.list("sys") == ["system (1.9.1)"]

    def test_list_remote(self, manager, caplog):
        assert manager.list_remote(r"1\.9") == ["1.9.1"]
        assert "1.9.1" in caplog.text

    def test_list_remote_failure(self, config, probe, downloader):
        """Test an unreachable tag list is a runtime error."""
        manager = DockerVersionManager(
            config, probe=probe, downloader=downloader,
            client=FakeGitHubClient(error=NetworkError("offline")),
        )
        with pytest.raises(DvmRuntimeError):
            manager.list_remote()

    def test_list_aliases(self, manager, caplog):
        manager.install("1.10.0")
        manager.alias("latest", "1.10.0")
        caplog.clear()

        assert manager.list_aliases() == {"latest": "1.10.0"}
        assert "\tlatest -> 1.10.0" in [r.getMessage() for r in caplog.records]

    def test_unalias(self, manager):
        manager.install("1.10.0")
        manager.alias("latest", "1.10.0")
        manager.unalias("latest")
        assert manager.list_aliases() == {}


class TestUpgrade:
    """Tests for the upgrade command."""

    def test_check_only(self, config, probe, downloader):
        manager = DockerVersionManager(
            config, probe=probe, downloader=downloader,
            client=FakeGitHubClient(latest_release="0.2.0"), current_version="0.1.0",
        )
        assert manager.upgrade(check_only=True) is False
        assert downloader.calls == []
        assert not os.path.exists(config.self_path)
