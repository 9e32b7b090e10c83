"""
Checksum-verified downloads.

Every published binary has a sibling ``<url>.sha256`` file whose first
token is the hex digest. A download is written to a temporary file beside
its destination and only moved into place once the digest matches.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import urllib.error
import urllib.request

from .collectors import USER_AGENT, NetworkError, http_get
from .common import ChecksumError, DvmRuntimeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
EXECUTABLE_MODE = 0o755


def file_checksum(file_path: str, algorithm: str = "sha256") -> str:
    """Hex digest of a file, read in chunks."""
    hasher = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def parse_checksum(text: str) -> str:
    """
    First token of a checksum file (``<digest>  <filename>`` or just ``<digest>``).

    Raises:
        ChecksumError: If the file holds no digest
    """
    tokens = text.split()
    if not tokens:
        raise ChecksumError("Checksum file is empty.")
    return tokens[0].lower()


class Downloader:
    """Fetch binaries over HTTP and verify them against published checksums."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def fetch_checksum(self, url: str) -> str:
        checksum_url = url + ".sha256"
        try:
            body = http_get(checksum_url, timeout=self.timeout)
        except NetworkError as e:
            raise DvmRuntimeError(f"Unable to download checksum from {checksum_url}.", e) from e
        return parse_checksum(body.decode("utf-8", "ignore"))

    def _stream_to(self, url: str, fileobj) -> str:
        """Write the response body to fileobj, returning its sha256."""
        hasher = hashlib.sha256()
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                for chunk in iter(lambda: response.read(CHUNK_SIZE), b""):
                    hasher.update(chunk)
                    fileobj.write(chunk)
        except (urllib.error.URLError, OSError) as e:
            raise DvmRuntimeError(f"Unable to download {url}.", e) from e
        return hasher.hexdigest()

    def download_with_checksum(self, url: str, dest: str) -> str:
        """
        Download url to dest, verifying the sha256 published at url + '.sha256'.

        Parent directories of dest are created as needed. On any failure
        dest is left untouched.

        Args:
            url: Binary URL
            dest: Destination file path

        Returns:
            dest

        Raises:
            ChecksumError: If the digest does not match
            DvmRuntimeError: If a download or filesystem operation fails
        """
        expected = self.fetch_checksum(url)

        dest_dir = os.path.dirname(os.path.abspath(dest))
        try:
            os.makedirs(dest_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".download-", dir=dest_dir)
        except OSError as e:
            raise DvmRuntimeError(f"Unable to create download directory {dest_dir}.", e) from e

        try:
            with os.fdopen(fd, "wb") as f:
                logger.debug(f"Downloading {url} to {tmp_path}")
                actual = self._stream_to(url, f)

            if actual != expected:
                raise ChecksumError(
                    f"Checksum mismatch for {url}: expected {expected}, got {actual}."
                )

            os.chmod(tmp_path, EXECUTABLE_MODE)
            os.replace(tmp_path, dest)
        except OSError as e:
            discard_file(tmp_path)
            raise DvmRuntimeError(f"Unable to save download to {dest}.", e) from e
        except DvmRuntimeError:
            discard_file(tmp_path)
            raise

        logger.debug(f"Verified sha256 {actual} for {dest}")
        return dest


def discard_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"Unable to remove temporary file {path}: {e}")
