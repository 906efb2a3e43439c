"""Credential caches for ECR authorization tokens.

A cache stores one `AuthEntry` per registry ID. The cache also owns the policy that decides
when an entry is too old to be used without first attempting a refresh.

Implementations:
- `FileCredentialsCache`: shared JSON document on disk (default `~/.ecr/cache.json`)
- `MemoryCredentialsCache`: process local, e.g. for a warm Lambda container
- `NullCredentialsCache`: caching disabled
"""

import hashlib
import json
import os
import tempfile
import threading
from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import marshmallow as mm
from aibs_informatics_core.utils.logging import get_logger
from aibs_informatics_core.utils.os_operations import get_env_var
from aibs_informatics_core.utils.time import get_current_time

from aibs_informatics_ecr_login.models import DEFAULT_REFRESH_RATIO, AuthEntry

logger = get_logger(__name__)


DISABLE_CACHE_ENV_VAR = "AWS_ECR_DISABLE_CACHE"
"""Environment variable that, when set to any non-empty value, disables caching."""

CACHE_DIR_ENV_VAR = "AWS_ECR_CACHE_DIR"
"""Environment variable overriding the cache directory."""

REFRESH_RATIO_ENV_VAR = "AWS_ECR_CACHE_REFRESH_RATIO"
"""Environment variable overriding the fraction of token lifetime cut off before refresh."""

DEFAULT_CACHE_DIR = "~/.ecr"
CACHE_FILENAME = "cache.json"
CACHE_FILE_VERSION = "1.0"

REGISTRIES_KEY = "registries"
VERSION_KEY = "version"


def validate_refresh_ratio(refresh_ratio: float) -> float:
    if not 0 < refresh_ratio <= 1:
        raise ValueError(f"Refresh ratio must be within (0, 1], got {refresh_ratio}")
    return refresh_ratio


@dataclass
class CredentialsCache:
    """Abstract store of ECR authorization tokens keyed by registry ID.

    Attributes:
        refresh_ratio: Fraction of a token's lifetime (counted back from its expiry) during
            which the cached token is considered stale and should be refreshed.
    """

    refresh_ratio: float = field(default=DEFAULT_REFRESH_RATIO, kw_only=True)

    def __post_init__(self):
        validate_refresh_ratio(self.refresh_ratio)

    @abstractmethod
    def get(self, registry: str) -> Optional[AuthEntry]:
        raise NotImplementedError("Please implement `get` method")  # pragma: no cover

    @abstractmethod
    def set(self, registry: str, entry: AuthEntry) -> None:
        raise NotImplementedError("Please implement `set` method")  # pragma: no cover

    @abstractmethod
    def list(self) -> List[AuthEntry]:
        raise NotImplementedError("Please implement `list` method")  # pragma: no cover

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError("Please implement `clear` method")  # pragma: no cover

    def is_valid(self, entry: AuthEntry, now: Optional[datetime] = None) -> bool:
        """Whether a cached entry can be used without refreshing it first.

        Args:
            entry (AuthEntry): the cached entry
            now (Optional[datetime]): time to test against. Defaults to current time.

        Returns:
            bool: True if the entry is still fresh
        """
        return entry.is_valid(now or get_current_time(), refresh_ratio=self.refresh_ratio)


@dataclass
class NullCredentialsCache(CredentialsCache):
    """A cache that never stores anything."""

    def get(self, registry: str) -> Optional[AuthEntry]:
        return None

    def set(self, registry: str, entry: AuthEntry) -> None:
        pass

    def list(self) -> List[AuthEntry]:
        return []

    def clear(self) -> None:
        pass


@dataclass
class MemoryCredentialsCache(CredentialsCache):
    """A process local cache."""

    entries: Dict[str, AuthEntry] = field(default_factory=dict)

    def __post_init__(self):
        super().__post_init__()
        self._lock = threading.Lock()

    def get(self, registry: str) -> Optional[AuthEntry]:
        with self._lock:
            return self.entries.get(registry)

    def set(self, registry: str, entry: AuthEntry) -> None:
        with self._lock:
            self.entries[registry] = entry

    def list(self) -> List[AuthEntry]:
        with self._lock:
            return list(self.entries.values())

    def clear(self) -> None:
        with self._lock:
            self.entries.clear()


@dataclass
class FileCredentialsCache(CredentialsCache):
    """A cache persisted as a JSON document on disk.

    Entries for all credential sets and regions share the one file. Each entry is keyed by
    `<cache_prefix><registry>` so that tokens obtained with different AWS credentials or in
    different regions are never mixed up.

    Attributes:
        path: The cache file.
        cache_prefix: Prefix scoping keys written and read by this cache.
    """

    path: Path
    cache_prefix: str = ""

    def __post_init__(self):
        super().__post_init__()
        self.path = Path(self.path).expanduser()

    def get(self, registry: str) -> Optional[AuthEntry]:
        return self._load().get(self._key(registry))

    def set(self, registry: str, entry: AuthEntry) -> None:
        entries = self._load()
        entries[self._key(registry)] = entry
        self._save(entries)

    def list(self) -> List[AuthEntry]:
        return [
            entry for key, entry in self._load().items() if key.startswith(self.cache_prefix)
        ]

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def _key(self, registry: str) -> str:
        return f"{self.cache_prefix}{registry}"

    def _load(self) -> Dict[str, AuthEntry]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read credential cache {self.path}, ignoring it: {e}")
            return {}

        if not isinstance(document, dict) or document.get(VERSION_KEY) != CACHE_FILE_VERSION:
            logger.warning(f"Credential cache {self.path} has an unsupported format, ignoring it")
            return {}

        registries = document.get(REGISTRIES_KEY) or {}
        if not isinstance(registries, dict):
            logger.warning(f"Credential cache {self.path} has malformed registries, ignoring it")
            return {}

        entries: Dict[str, AuthEntry] = {}
        for key, value in registries.items():
            try:
                entries[key] = AuthEntry.from_dict(value)
            except (mm.ValidationError, TypeError) as e:
                logger.debug(f"Skipping malformed credential cache entry {key}: {e}")
        return entries

    def _save(self, entries: Dict[str, AuthEntry]):
        document: Dict[str, Any] = {
            VERSION_KEY: CACHE_FILE_VERSION,
            REGISTRIES_KEY: {key: entry.to_dict() for key, entry in entries.items()},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling file and swap it in so readers never see a partial document
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, prefix=f".{self.path.name}.", delete=False
            ) as f:
                json.dump(document, f, indent=2)
                tmp_path = Path(f.name)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Could not write credential cache {self.path}: {e}")


def get_cache_prefix(region: str, access_key_id: Optional[str] = None) -> str:
    """Build the key prefix that scopes cache entries to a region and credential set.

    Args:
        region (str): AWS region the tokens are requested in
        access_key_id (Optional[str]): AWS access key ID in use, if known

    Returns:
        str: the prefix
    """
    if access_key_id:
        digest = hashlib.sha256(access_key_id.encode("utf-8")).hexdigest()[:16]
        return f"{digest}-{region}-"
    return f"{region}-"


def build_credentials_cache(
    region: str,
    access_key_id: Optional[str] = None,
    cache_dir: Optional[Union[str, Path]] = None,
    refresh_ratio: Optional[float] = None,
) -> CredentialsCache:
    """Build the credential cache configured by the environment.

    Args:
        region (str): AWS region the tokens are requested in
        access_key_id (Optional[str]): AWS access key ID in use, if known
        cache_dir (Optional[Union[str, Path]]): cache directory. Defaults to the value of
            `AWS_ECR_CACHE_DIR`, or `~/.ecr`.
        refresh_ratio (Optional[float]): token refresh ratio. Defaults to the value of
            `AWS_ECR_CACHE_REFRESH_RATIO`, or 0.5.

    Raises:
        ValueError: if the refresh ratio is invalid

    Returns:
        CredentialsCache: a null cache if caching is disabled, a file cache otherwise
    """
    if refresh_ratio is None:
        raw_ratio = get_env_var(REFRESH_RATIO_ENV_VAR)
        try:
            refresh_ratio = float(raw_ratio) if raw_ratio else DEFAULT_REFRESH_RATIO
        except ValueError as e:
            raise ValueError(f"Invalid {REFRESH_RATIO_ENV_VAR} value: {raw_ratio}") from e

    if get_env_var(DISABLE_CACHE_ENV_VAR):
        logger.debug("Credential cache disabled")
        return NullCredentialsCache(refresh_ratio=refresh_ratio)

    cache_dir = cache_dir or get_env_var(CACHE_DIR_ENV_VAR, default_value=DEFAULT_CACHE_DIR)
    return FileCredentialsCache(
        path=Path(cache_dir).expanduser() / CACHE_FILENAME,
        cache_prefix=get_cache_prefix(region, access_key_id),
        refresh_ratio=refresh_ratio,
    )
