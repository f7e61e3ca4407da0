"""Configuration for storage access and local result trees."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_NAME = "fedoratestresults"
DEFAULT_CONTAINER_NAME = "$web"
DEFAULT_LOCAL_CACHE_DIR = "~/.fedora-test-analyzer/blobs"
DEFAULT_RESULTS_ROOT = "~/lisa_results"
DEFAULT_VERSION_PREFIX = "Fedora-Cloud"

CONFIG_KEYS = [
    'AZURE_STORAGE_ACCOUNT_NAME', 'AZURE_STORAGE_CONTAINER_NAME',
    'AZURE_STORAGE_ENDPOINT', 'AZURE_STORAGE_SAS_TOKEN',
    'AZURE_STORAGE_CONNECTION_STRING', 'USE_LOCAL_CACHE', 'LOCAL_CACHE_DIR',
    'LISA_RESULTS_ROOT', 'VERSION_DIR_PREFIX', 'API_PORT', 'FASTMCP_PORT',
]


def load_config() -> dict:
    """Load config from environment variables and .env file.

    Environment variables take precedence over .env file values.
    """
    paths = [
        os.environ.get('FEDORA_TEST_ANALYZER_CONFIG'),
        Path.cwd() / '.env',
        Path(__file__).parent.parent / '.env',
    ]
    config = {}
    for p in paths:
        if p and Path(p).exists():
            try:
                for line in Path(p).read_text().splitlines():
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        config[key.strip()] = value.strip().strip('"').strip("'")
                break
            except OSError as e:
                logger.warning(f"Could not read config file {p}: {e}")

    for key in CONFIG_KEYS:
        env_value = os.environ.get(key)
        if env_value is not None:
            config[key] = env_value

    return config


def _as_bool(value: Optional[str]) -> bool:
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'on')


def _parse_connection_string(conn: str) -> dict:
    parts = {}
    for item in conn.split(';'):
        if '=' in item:
            key, value = item.split('=', 1)
            parts[key.strip()] = value.strip()
    return parts


@dataclass(frozen=True)
class StorageConfig:
    """Resolved storage settings."""
    account_name: str = DEFAULT_ACCOUNT_NAME
    container_name: str = DEFAULT_CONTAINER_NAME
    endpoint: str = f"https://{DEFAULT_ACCOUNT_NAME}.z5.web.core.windows.net"
    sas_token: Optional[str] = None
    use_local_cache: bool = False
    local_cache_dir: Path = Path(DEFAULT_LOCAL_CACHE_DIR).expanduser()
    results_root: Path = Path(DEFAULT_RESULTS_ROOT).expanduser()
    version_prefix: str = DEFAULT_VERSION_PREFIX

    @property
    def list_endpoint(self) -> str:
        """Blob service URL for the container, used for listing."""
        return f"https://{self.account_name}.blob.core.windows.net/{self.container_name}"

    @classmethod
    def from_mapping(cls, values: dict) -> "StorageConfig":
        account = values.get('AZURE_STORAGE_ACCOUNT_NAME') or DEFAULT_ACCOUNT_NAME
        endpoint = values.get('AZURE_STORAGE_ENDPOINT') or f"https://{account}.z5.web.core.windows.net"
        sas_token = values.get('AZURE_STORAGE_SAS_TOKEN') or None

        conn = values.get('AZURE_STORAGE_CONNECTION_STRING')
        if conn:
            parts = _parse_connection_string(conn)
            endpoint = parts.get('BlobEndpoint', endpoint)
            sas_token = parts.get('SharedAccessSignature', sas_token)
            account = parts.get('AccountName', account)

        return cls(
            account_name=account,
            container_name=values.get('AZURE_STORAGE_CONTAINER_NAME') or DEFAULT_CONTAINER_NAME,
            endpoint=endpoint.rstrip('/'),
            sas_token=sas_token.lstrip('?') if sas_token else None,
            use_local_cache=_as_bool(values.get('USE_LOCAL_CACHE')),
            local_cache_dir=Path(values.get('LOCAL_CACHE_DIR') or DEFAULT_LOCAL_CACHE_DIR).expanduser(),
            results_root=Path(values.get('LISA_RESULTS_ROOT') or DEFAULT_RESULTS_ROOT).expanduser(),
            version_prefix=values.get('VERSION_DIR_PREFIX') or DEFAULT_VERSION_PREFIX,
        )


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_mapping(load_config())


def get_port(key: str, default: int) -> int:
    return int(load_config().get(key, default))
