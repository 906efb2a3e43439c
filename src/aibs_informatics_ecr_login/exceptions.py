"""Exceptions raised while resolving ECR login credentials.

Errors are grouped by the stage that failed:

- ``RegistryError``: the server URL is not an ECR registry host.
- ``TokenError``: the authorization token could not be decoded.
- ``RemoteFetchError``: the authorization token could not be obtained from ECR.
"""

from aibs_informatics_core.exceptions import ApplicationException

PROGRAM_NAME = "docker-credential-ecr-login"


class ECRLoginError(ApplicationException):
    """Base class for all ECR login errors."""


# ----------------------------------------------------------
# Registry URL parsing
# ----------------------------------------------------------


class RegistryError(ECRLoginError, ValueError):
    pass


class NotECRHostError(RegistryError):
    """Raised when a server URL does not look like an ECR registry at all."""

    def __init__(self, server_url: str):
        super().__init__(
            f"{PROGRAM_NAME} can only be used with Amazon Elastic Container Registry. "
            f"(server URL: {server_url})"
        )
        self.server_url = server_url


class MalformedECRHostError(RegistryError):
    """Raised when a server URL looks like ECR but is not a valid repository URI."""

    def __init__(self, server_url: str):
        super().__init__(
            f"{server_url} is not a valid repository URI for Amazon Elastic Container Registry."
        )
        self.server_url = server_url


# ----------------------------------------------------------
# Token decoding
# ----------------------------------------------------------


class TokenError(ECRLoginError, ValueError):
    pass


class InvalidTokenEncodingError(TokenError):
    pass


class InvalidTokenFormatError(TokenError):
    pass


# ----------------------------------------------------------
# Remote token retrieval
# ----------------------------------------------------------


class RemoteFetchError(ECRLoginError):
    pass


class RemoteUnavailableError(RemoteFetchError):
    pass


class NoAuthorizationDataError(RemoteFetchError):
    pass


class InvalidProxyEndpointError(RemoteFetchError):
    def __init__(self, proxy_endpoint: str):
        super().__init__(f"Invalid ProxyEndpoint returned by ECR: {proxy_endpoint}")
        self.proxy_endpoint = proxy_endpoint
