"""ECR login credential resolution.

`ECRLoginClient` ties together the credential cache and the remote token source:

1. a fresh cached token is returned without calling ECR
2. a missing or stale token is refreshed from ECR and written back to the cache
3. if ECR cannot provide a token, a stale cached token is returned instead of failing
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import boto3
from aibs_informatics_aws_utils.core import get_region
from aibs_informatics_core.utils.logging import get_logger
from aibs_informatics_core.utils.time import get_current_time

from aibs_informatics_ecr_login.authorization import extract_token
from aibs_informatics_ecr_login.cache import CredentialsCache, build_credentials_cache
from aibs_informatics_ecr_login.exceptions import (
    ECRLoginError,
    InvalidProxyEndpointError,
    RegistryError,
)
from aibs_informatics_ecr_login.models import AuthEntry, ECRCredentials
from aibs_informatics_ecr_login.registry import Registry, extract_registry
from aibs_informatics_ecr_login.source import ECRTokenSource, RemoteTokenSource, get_ecr_client

logger = get_logger(__name__)


@dataclass
class ECRLoginClient:
    """Resolves docker login credentials for ECR registries.

    Attributes:
        token_source: Source of fresh authorization tokens.
        credentials_cache: Cache of previously fetched authorization tokens.
    """

    token_source: RemoteTokenSource
    credentials_cache: CredentialsCache

    def get_credentials(self, server_url: str) -> ECRCredentials:
        """Get docker login credentials for a registry server URL.

        Args:
            server_url (str): registry server URL
                (e.g. `123456789012.dkr.ecr.us-west-2.amazonaws.com`)

        Raises:
            RegistryError: if the server URL is not an ECR registry
            RemoteFetchError: if no token could be fetched and none is cached

        Returns:
            ECRCredentials: the credentials
        """
        registry = extract_registry(server_url)
        logger.debug(
            f"Retrieving credentials for registry {registry.id} "
            f"(region: {registry.region}, server URL: {server_url})"
        )
        return self.get_credentials_by_registry_id(registry.id)

    def get_credentials_by_registry_id(self, registry_id: str) -> ECRCredentials:
        """Get docker login credentials for a registry (account) ID.

        Args:
            registry_id (str): registry ID

        Raises:
            RemoteFetchError: if no token could be fetched and none is cached

        Returns:
            ECRCredentials: the credentials
        """
        cached_entry = self.credentials_cache.get(registry_id)
        if cached_entry is not None:
            if self.credentials_cache.is_valid(cached_entry):
                logger.debug(f"Using cached token for registry {registry_id}")
                return extract_token(cached_entry.authorization_token, cached_entry.proxy_endpoint)
            logger.debug(
                f"Cached token for registry {registry_id} is no longer valid "
                f"(requested at: {cached_entry.requested_at}, "
                f"expires at: {cached_entry.expires_at})"
            )

        try:
            return self._fetch_credentials(registry_id)
        except ECRLoginError as e:
            if cached_entry is None:
                raise
            return self._fallback_to_cached_entry(cached_entry, e)

    def list_credentials(self) -> List[ECRCredentials]:
        """List credentials for all cached registries.

        Cached entries that cannot be decoded are skipped. If no cached entry can be used,
        credentials for the default registry are fetched instead.

        Raises:
            ECRLoginError: if the cache is empty and the default registry fetch fails

        Returns:
            List[ECRCredentials]: the best known credentials
        """
        credentials = []
        for entry in self.credentials_cache.list():
            try:
                credentials.append(extract_token(entry.authorization_token, entry.proxy_endpoint))
            except ECRLoginError as e:
                logger.debug(f"Could not extract token for {entry.proxy_endpoint}: {e}")

        if not credentials:
            logger.debug("No usable credentials in cache, fetching default registry")
            credentials.append(self._fetch_credentials(None))
        return credentials

    def _fetch_credentials(self, registry_id: Optional[str]) -> ECRCredentials:
        raw_token = self.token_source.fetch_token(registry_id)

        try:
            registry = extract_registry(raw_token.proxy_endpoint)
        except RegistryError as e:
            raise InvalidProxyEndpointError(raw_token.proxy_endpoint) from e

        credentials = extract_token(raw_token.authorization_token, raw_token.proxy_endpoint)
        self.credentials_cache.set(
            registry.id,
            AuthEntry(
                authorization_token=raw_token.authorization_token,
                requested_at=get_current_time(),
                expires_at=raw_token.expires_at,
                proxy_endpoint=raw_token.proxy_endpoint,
            ),
        )
        return credentials

    def _fallback_to_cached_entry(
        self, cached_entry: AuthEntry, error: ECRLoginError
    ) -> ECRCredentials:
        # Entries go stale before the token itself expires
        logger.info(
            f"Got error fetching authorization token. Falling back to cached token "
            f"for {cached_entry.proxy_endpoint}: {error}"
        )
        return extract_token(cached_entry.authorization_token, cached_entry.proxy_endpoint)


def get_ecr_login_client(
    server_url: Optional[str] = None,
    registry: Optional[Registry] = None,
    region: Optional[str] = None,
    credentials_cache: Optional[CredentialsCache] = None,
    cache_dir: Optional[Union[str, Path]] = None,
    session: Optional[boto3.Session] = None,
) -> ECRLoginClient:
    """Build an ECR login client for a registry.

    The ECR client is created in the registry's region (and FIPS mode). Without a registry,
    the client targets the given or default region.

    Args:
        server_url (Optional[str]): registry server URL to resolve the registry from
        registry (Optional[Registry]): the registry. Ignored if `server_url` is given.
        region (Optional[str]): region used when no registry is given
        credentials_cache (Optional[CredentialsCache]): cache to use. Defaults to the
            cache configured by the environment.
        cache_dir (Optional[Union[str, Path]]): cache directory used when no cache is given.
        session (Optional[boto3.Session]): boto3 session. Defaults to a new session.

    Raises:
        RegistryError: if `server_url` is not an ECR registry

    Returns:
        ECRLoginClient: the client
    """
    if server_url is not None:
        registry = extract_registry(server_url)

    session = session or boto3.Session()
    if registry is not None:
        region, fips = registry.region, registry.fips
    else:
        region, fips = get_region(region), False

    if credentials_cache is None:
        aws_credentials = session.get_credentials()
        credentials_cache = build_credentials_cache(
            region=region,
            access_key_id=aws_credentials.access_key if aws_credentials else None,
            cache_dir=cache_dir,
        )

    ecr_client = get_ecr_client(region=region, fips=fips, session=session)
    return ECRLoginClient(
        token_source=ECRTokenSource(ecr_client=ecr_client),
        credentials_cache=credentials_cache,
    )
