"""ECR login credential handlers.

Provides Lambda handlers returning docker login credentials for ECR registries.

Tokens are cached under `/tmp/.ecr` unless `AWS_ECR_CACHE_DIR` says otherwise, so warm
containers reuse them across invocations.
"""

from aibs_informatics_core.utils.os_operations import get_env_var

from aibs_informatics_ecr_login.cache import CACHE_DIR_ENV_VAR
from aibs_informatics_ecr_login.client import get_ecr_login_client
from aibs_informatics_ecr_login.common.handler import LambdaHandler
from aibs_informatics_ecr_login.handlers.credentials.model import (
    GetECRCredentialsRequest,
    GetECRCredentialsResponse,
    ListECRCredentialsRequest,
    ListECRCredentialsResponse,
)

LAMBDA_CACHE_DIR = "/tmp/.ecr"
"""Default cache directory in Lambda, where only `/tmp` is writable."""


def get_lambda_cache_dir() -> str:
    return get_env_var(CACHE_DIR_ENV_VAR, default_value=LAMBDA_CACHE_DIR)


class GetECRCredentialsHandler(
    LambdaHandler[GetECRCredentialsRequest, GetECRCredentialsResponse]
):
    def handle(self, request: GetECRCredentialsRequest) -> GetECRCredentialsResponse:
        """Resolve login credentials for a registry server URL or registry ID.

        Args:
            request (GetECRCredentialsRequest): the registry to get credentials for

        Returns:
            GetECRCredentialsResponse: the credentials
        """
        if request.server_url:
            client = get_ecr_login_client(
                server_url=request.server_url, cache_dir=get_lambda_cache_dir()
            )
            credentials = client.get_credentials(request.server_url)
        else:
            client = get_ecr_login_client(region=request.region, cache_dir=get_lambda_cache_dir())
            registry_id: str = request.registry_id  # type: ignore[assignment]
            credentials = client.get_credentials_by_registry_id(registry_id)

        self.log.info(f"Resolved credentials for {credentials.proxy_endpoint}")
        return GetECRCredentialsResponse(credentials=credentials)


class ListECRCredentialsHandler(
    LambdaHandler[ListECRCredentialsRequest, ListECRCredentialsResponse]
):
    def handle(self, request: ListECRCredentialsRequest) -> ListECRCredentialsResponse:
        client = get_ecr_login_client(region=request.region, cache_dir=get_lambda_cache_dir())
        credentials = client.list_credentials()
        self.log.info(f"Resolved credentials for {len(credentials)} registries")
        return ListECRCredentialsResponse(credentials=credentials)


get_credentials_handler = GetECRCredentialsHandler.get_handler()
list_credentials_handler = ListECRCredentialsHandler.get_handler()
