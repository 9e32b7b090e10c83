"""
Version collection from GitHub.

Docker client versions come from the tag list of docker/docker, the latest
dvm release from getcarina/dvm. Only single pages are requested.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.request
from typing import Any

from packaging.version import InvalidVersion, Version

from .common import EXPERIMENTAL, DvmRuntimeError, InvalidOperation
from .config import Config

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
DOCKER_REPO = ("docker", "docker")
DVM_REPO = ("getcarina", "dvm")
USER_AGENT = "dvm-helper"

VERSION_TAG_RE = re.compile(r"^v([1-9]\d*\.\d+\.\d+)$")

RATE_LIMIT_WARNING = (
    "Your GitHub API rate limit has been exceeded. Set the GITHUB_TOKEN environment "
    "variable or use the --github-token parameter with your GitHub personal access "
    "token to authenticate and increase the rate limit."
)


class CollectionError(Exception):
    """Raised when version collection fails."""
    pass


class NetworkError(CollectionError):
    """
    Raised when network requests fail.

    Attributes:
        status: HTTP status code, if the server answered
    """
    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class ParseError(CollectionError):
    """Raised when response parsing fails."""
    pass


def http_get(url: str, timeout: int = 30, headers: dict[str, str] | None = None) -> bytes:
    """Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds
        headers: Optional HTTP headers

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If the request fails or does not answer 200
    """
    default_headers = {"User-Agent": USER_AGENT}
    if headers:
        default_headers.update(headers)

    req = urllib.request.Request(url, headers=default_headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if status != 200:
                raise NetworkError(f"Failed to fetch {url}: status {status}", status=status)
            return response.read()
    except urllib.error.HTTPError as e:
        raise NetworkError(f"Failed to fetch {url}: {e}", status=e.code) from e
    except (urllib.error.URLError, OSError) as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def extract_docker_version(tag: str) -> str:
    """Return the numeric version of a release tag (v1.10.0 -> 1.10.0), '' if it has another shape."""
    match = VERSION_TAG_RE.match(tag)
    return match.group(1) if match else ""


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two semantic version strings.

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        InvalidVersion: If either string is not a version
    """
    ver1 = Version(v1)
    ver2 = Version(v2)
    if ver1 < ver2:
        return -1
    elif ver1 > ver2:
        return 1
    return 0


class GitHubClient:
    """Minimal GitHub REST client, authenticated when a token is configured."""

    def __init__(self, token: str = "", timeout: int = 30, api_url: str = GITHUB_API_URL):
        self.token = token
        self.timeout = timeout
        self.api_url = api_url.rstrip("/")

    def get_json(self, path: str) -> Any:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"

        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug(f"GET {url}")
        body = http_get(url, timeout=self.timeout, headers=headers)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

    def list_tags(self, owner: str, repo: str) -> list[str]:
        data = self.get_json(f"repos/{owner}/{repo}/tags")
        if not isinstance(data, list):
            raise ParseError(f"Unexpected tag list for {owner}/{repo}")
        return [tag["name"] for tag in data if isinstance(tag, dict) and tag.get("name")]

    def latest_release_tag(self, owner: str, repo: str) -> str:
        data = self.get_json(f"repos/{owner}/{repo}/releases/latest")
        tag = data.get("tag_name", "") if isinstance(data, dict) else ""
        if not tag:
            raise ParseError(f"No tag_name in latest release of {owner}/{repo}")
        return tag


def warn_when_rate_limit_exceeded(error: BaseException) -> None:
    """Log the access token hint when GitHub refused a request with 403."""
    if isinstance(error, NetworkError) and error.status == 403:
        logger.warning(RATE_LIMIT_WARNING)


class RemoteCatalog:
    """Docker versions published upstream, and the latest dvm release."""

    def __init__(self, config: Config, client: GitHubClient | None = None):
        self.config = config
        self.client = client or GitHubClient(
            token=config.github_token,
            timeout=config.settings.timeout_seconds,
        )
        self._tags: list[str] | None = None

    def _docker_tags(self) -> list[str]:
        # Fetched once per invocation
        if self._tags is None:
            try:
                self._tags = self.client.list_tags(*DOCKER_REPO)
            except CollectionError as e:
                warn_when_rate_limit_exceeded(e)
                raise DvmRuntimeError("Unable to retrieve list of Docker tags from GitHub", e) from e
        return self._tags

    def get_available_versions(self, pattern: str = "") -> list[str]:
        """
        Released Docker versions whose tag matches a regular expression.

        Results are sorted as plain strings, so 1.10.0 sorts before 1.9.0.

        Args:
            pattern: Regular expression searched in the raw tag (e.g. 'v1\\.1')

        Raises:
            InvalidOperation: If the pattern is not a valid regular expression
            DvmRuntimeError: If the tag list cannot be retrieved
        """
        try:
            pattern_re = re.compile(pattern or "")
        except re.error as e:
            raise InvalidOperation("Invalid pattern.", e) from e

        results = []
        for tag in self._docker_tags():
            version = extract_docker_version(tag)
            if version and pattern_re.search(tag):
                results.append(version)

        # TODO: sort numerically once list-remote output ordering can change for existing users
        return sorted(results)

    def version_exists(self, version: str) -> bool:
        if version == EXPERIMENTAL:
            return True
        return version in self.get_available_versions("")

    def is_upgrade_available(self, current_version: str) -> tuple[bool, str]:
        """
        Check whether a newer dvm release exists.

        Never raises: every failure is logged as a warning and reported as
        "no upgrade".

        Args:
            current_version: Version of the running dvm-helper

        Returns:
            (upgrade_available, latest_tag)
        """
        try:
            latest_tag = self.client.latest_release_tag(*DVM_REPO)
        except CollectionError as e:
            warn_when_rate_limit_exceeded(e)
            logger.warning("Unable to query the latest dvm release from GitHub:")
            logger.warning(str(e))
            return False, ""

        try:
            Version(current_version)
        except InvalidVersion as e:
            logger.warning("Unable to parse the current dvm version as a semantic version!")
            logger.warning(str(e))
            return False, ""

        try:
            newer = compare_versions(latest_tag, current_version) > 0
        except InvalidVersion as e:
            logger.warning("Unable to parse the latest dvm version as a semantic version!")
            logger.warning(str(e))
            return False, ""

        return newer, latest_tag
