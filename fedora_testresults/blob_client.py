"""
Access to Fedora test result blobs.

Reads from a public Azure static-website container over plain HTTP, or from a
local directory tree laid out with the same <compose>/<arch>/<file> paths.
Both stores share one contract: a missing blob is ``None``, never an error.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from .cache import BLOB_TTL_SECONDS, DEFAULT_TTL_SECONDS, TTLCache
from .config import StorageConfig

logger = logging.getLogger(__name__)

GET_TIMEOUT = 60
HEAD_TIMEOUT = 10


class BlobClient:
    """Client for test result blobs in Azure Blob Storage."""

    def __init__(self, config: Optional[StorageConfig] = None, cache: Optional[TTLCache] = None):
        """
        Initialize blob client.

        Args:
            config: Storage settings. Defaults to StorageConfig()
            cache: Shared expiring cache. A private one is created if omitted
        """
        self.config = config or StorageConfig()
        self.cache = cache if cache is not None else TTLCache()
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "fedora-test-analyzer/0.1.0"
        })

    def get_blob_url(self, path: str) -> str:
        url = f"{self.config.endpoint}/{quote(path)}"
        if self.config.sas_token:
            url = f"{url}?{self.config.sas_token}"
        return url

    def fetch(self, path: str) -> Optional[bytes]:
        """
        Download a blob, with caching.

        Args:
            path: Blob path (e.g., "Fedora-Cloud-42-20260122.0/x86_64/junit.xml")

        Returns:
            Raw blob content, or None if the blob is missing or unreachable
        """
        cache_key = f"blob:{path}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Using cached blob: {path}")
            return cached

        url = self.get_blob_url(path)
        logger.info(f"Downloading {url}")
        try:
            response = self.session.get(url, timeout=GET_TIMEOUT)
        except requests.RequestException as e:
            logger.error(f"Failed to download {path}: {e}")
            return None

        if not response.ok:
            logger.warning(f"Blob {path} not available: HTTP {response.status_code}")
            return None

        content = response.content
        self.cache.set(cache_key, content, ttl=BLOB_TTL_SECONDS)
        return content

    def fetch_text(self, path: str) -> Optional[str]:
        content = self.fetch(path)
        if content is None:
            return None
        return content.decode('utf-8', errors='replace')

    def exists(self, path: str) -> bool:
        """Check if a blob exists with a HEAD request."""
        cache_key = f"exists:{path}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            response = self.session.head(self.get_blob_url(path), timeout=HEAD_TIMEOUT)
            found = response.ok
        except requests.RequestException as e:
            logger.debug(f"Existence check failed for {path}: {e}")
            return False

        self.cache.set(cache_key, found, ttl=DEFAULT_TTL_SECONDS)
        return found

    def list_blobs(self, prefix: str = "") -> list[str]:
        """
        List blob names under a prefix.

        Uses the container "List Blobs" operation, which only works when the
        container allows public listing or a SAS token grants it. Follows
        NextMarker until the last page.

        Returns:
            Blob names, or an empty list if listing is not possible
        """
        cache_key = f"list:{prefix or 'all'}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        base_params = {"restype": "container", "comp": "list"}
        if prefix:
            base_params["prefix"] = prefix
        url = self.config.list_endpoint
        if self.config.sas_token:
            url = f"{url}?{self.config.sas_token}"

        names = []
        marker = None
        while True:
            params = dict(base_params, marker=marker) if marker else dict(base_params)
            try:
                response = self.session.get(url, params=params, timeout=GET_TIMEOUT)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"Failed to list blobs: {e}")
                return []

            soup = BeautifulSoup(response.text, 'html.parser')
            names.extend(n for n in (tag.get_text().strip() for tag in soup.find_all('name')) if n)

            next_marker = soup.find('nextmarker')
            marker = next_marker.get_text().strip() if next_marker else ""
            if not marker:
                break
            logger.debug(f"Listed {len(names)} blobs so far, continuing at {marker}")

        self.cache.set(cache_key, names, ttl=DEFAULT_TTL_SECONDS)
        return names


class LocalBlobStore:
    """Blob store backed by a directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Optional[Path]:
        """Path of a blob under the root, or None if it would escape the root."""
        file_path = (self.root / path).resolve()
        if not file_path.is_relative_to(self.root.resolve()):
            logger.warning(f"Rejecting blob path outside {self.root}: {path}")
            return None
        return file_path

    def fetch(self, path: str) -> Optional[bytes]:
        file_path = self._resolve(path)
        if file_path is None:
            return None
        try:
            return file_path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"Local blob not found: {file_path}")
            return None
        except OSError as e:
            logger.warning(f"Cannot read local blob {file_path}: {e}")
            return None

    def fetch_text(self, path: str) -> Optional[str]:
        content = self.fetch(path)
        if content is None:
            return None
        return content.decode('utf-8', errors='replace')

    def exists(self, path: str) -> bool:
        file_path = self._resolve(path)
        return file_path is not None and file_path.is_file()

    def list_blobs(self, prefix: str = "") -> list[str]:
        if not self.root.is_dir():
            return []
        names = sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob('*') if p.is_file()
        )
        return [n for n in names if n.startswith(prefix)]


def make_blob_store(config: StorageConfig, cache: Optional[TTLCache] = None):
    """Pick the local mirror or the remote container per USE_LOCAL_CACHE."""
    if config.use_local_cache:
        logger.info(f"Using local blob store at {config.local_cache_dir}")
        return LocalBlobStore(config.local_cache_dir)
    return BlobClient(config, cache)
