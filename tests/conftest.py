"""
Shared fixtures: an isolated dvm directory, fake Docker binaries, and
test doubles for the network and version probing seams.
"""

import os
from pathlib import Path

import pytest

from dvm_helper.config import Config
from dvm_helper.environment import Platform
from dvm_helper.logging_config import setup_logging
from dvm_helper.manager import DockerVersionManager


DOCKER_TAGS = [
    "v1.10.0",
    "v1.10.0-rc1",
    "v1.9.1",
    "v1.8.3",
    "v0.9.0",
    "docs-v1.9.1",
]

LINUX = Platform(os_name="Linux", arch="x86_64", binary_ext="")


def make_binary(directory: Path, version: str, name: str = "docker") -> Path:
    """Create an executable whose contents is the version FakeProbe reports."""
    directory.mkdir(parents=True, exist_ok=True)
    binary = directory / name
    binary.write_text(version)
    binary.chmod(0o755)
    return binary


class FakeProbe:
    """Reports the text stored in a fake binary as its version."""

    def __init__(self):
        self.calls = []

    def probe(self, binary_path):
        self.calls.append(binary_path)
        try:
            version = Path(binary_path).read_text().strip()
        except OSError:
            return None
        return version or None


class FakeDownloader:
    """Writes a fake docker binary instead of downloading one."""

    def __init__(self, experimental_version="1.12.0-dev"):
        self.experimental_version = experimental_version
        self.calls = []

    def download_with_checksum(self, url, dest):
        self.calls.append((url, dest))
        version = url.rsplit("/", 1)[-1][len("docker-"):]
        if version == "latest":
            version = self.experimental_version
        make_binary(Path(dest).parent, version, name=Path(dest).name)
        return dest


class FakeGitHubClient:
    """Canned GitHub answers."""

    def __init__(self, tags=None, latest_release="0.1.0", error=None):
        self.tags = list(DOCKER_TAGS if tags is None else tags)
        self.latest_release = latest_release
        self.error = error
        self.tag_requests = 0

    def list_tags(self, owner, repo):
        self.tag_requests += 1
        if self.error is not None:
            raise self.error
        return self.tags

    def latest_release_tag(self, owner, repo):
        if self.error is not None:
            raise self.error
        return self.latest_release


@pytest.fixture(autouse=True)
def _logging():
    """Route dvm_helper logs to caplog."""
    setup_logging(debug=True, propagate=True)
    yield


@pytest.fixture
def system_bin(tmp_path):
    """A directory holding the system docker client (1.9.1)."""
    directory = tmp_path / "usr" / "bin"
    make_binary(directory, "1.9.1")
    return directory


@pytest.fixture
def dvm_dir(tmp_path):
    directory = tmp_path / "dvm"
    directory.mkdir()
    return directory


@pytest.fixture
def config(dvm_dir, system_bin, tmp_path):
    other = tmp_path / "other" / "bin"
    other.mkdir(parents=True)
    return Config(
        dvm_dir=str(dvm_dir),
        path=os.pathsep.join([str(system_bin), str(other)]),
        self_path=str(tmp_path / "dvm-helper"),
        platform=LINUX,
    )


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def github():
    return FakeGitHubClient()


@pytest.fixture
def manager(config, probe, downloader, github):
    return DockerVersionManager(
        config,
        probe=probe,
        downloader=downloader,
        client=github,
        current_version="0.1.0",
    )
