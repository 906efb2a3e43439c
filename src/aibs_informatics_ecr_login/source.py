"""Remote sources of ECR authorization tokens."""

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from aibs_informatics_core.utils.logging import get_logger
from aibs_informatics_core.utils.time import get_current_time
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from aibs_informatics_ecr_login.exceptions import NoAuthorizationDataError, RemoteUnavailableError
from aibs_informatics_ecr_login.models import RawToken

logger = get_logger(__name__)

DEFAULT_REGISTRY = "default registry"


class RemoteTokenSource(Protocol):
    def fetch_token(self, registry_id: Optional[str] = None) -> RawToken:
        """Fetch an authorization token for a registry.

        Args:
            registry_id (Optional[str]): registry (account) ID. None for the default
                registry of the caller's account.

        Returns:
            RawToken: the token, its proxy endpoint and its expiry
        """
        ...  # pragma: no cover


def get_ecr_client(
    region: Optional[str] = None,
    fips: bool = False,
    session: Optional[boto3.Session] = None,
) -> BaseClient:
    """Create a boto3 ECR client, optionally addressing the FIPS endpoint.

    Args:
        region (Optional[str]): AWS region. Defaults to the session's region.
        fips (bool): Whether to use the FIPS endpoint. Defaults to False.
        session (Optional[boto3.Session]): boto3 session. Defaults to a new session.

    Returns:
        BaseClient: the client
    """
    session = session or boto3.Session()
    return session.client("ecr", region_name=region, config=Config(use_fips_endpoint=fips))


@dataclass
class ECRTokenSource:
    """Fetches authorization tokens from the ECR `GetAuthorizationToken` API."""

    ecr_client: BaseClient

    def fetch_token(self, registry_id: Optional[str] = None) -> RawToken:
        """Call ECR for an authorization token.

        Args:
            registry_id (Optional[str]): registry (account) ID. None for the default registry.

        Raises:
            RemoteUnavailableError: if the ECR call fails
            NoAuthorizationDataError: if ECR returns no usable authorization data

        Returns:
            RawToken: the first complete authorization data item returned
        """
        target = registry_id if registry_id is not None else DEFAULT_REGISTRY
        try:
            if registry_id is None:
                logger.debug("Calling ECR.GetAuthorizationToken for default registry")
                response = self.ecr_client.get_authorization_token()
            else:
                logger.debug(f"Calling ECR.GetAuthorizationToken for registry {registry_id}")
                response = self.ecr_client.get_authorization_token(registryIds=[registry_id])
        except (ClientError, BotoCoreError) as e:
            raise RemoteUnavailableError(f"ecr: Failed to get authorization token: {e}") from e

        if not response:
            raise NoAuthorizationDataError(f"missing AuthorizationData in ECR response for {target}")

        for auth_data in response.get("authorizationData") or []:
            proxy_endpoint = auth_data.get("proxyEndpoint")
            authorization_token = auth_data.get("authorizationToken")
            if proxy_endpoint and authorization_token:
                return RawToken(
                    authorization_token=authorization_token,
                    proxy_endpoint=proxy_endpoint,
                    expires_at=auth_data.get("expiresAt") or get_current_time(),
                )
        raise NoAuthorizationDataError(f"No AuthorizationToken found for {target}")
