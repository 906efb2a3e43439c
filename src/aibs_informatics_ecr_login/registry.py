"""ECR registry identification.

Parses Docker registry server URLs into the ECR registry (account ID, region and
FIPS mode) they refer to.
"""

import re
from dataclasses import dataclass

from aibs_informatics_ecr_login.exceptions import MalformedECRHostError, NotECRHostError

PROXY_ENDPOINT_SCHEME = "https://"

ECR_HOST_PATTERN = re.compile(
    r"(^[a-zA-Z0-9][a-zA-Z0-9-_]*)\.dkr\.ecr(\-fips)?\.([a-zA-Z0-9][a-zA-Z0-9-_]*)\.amazonaws\.com(\.cn)?"
)
"""Matches `<account>.dkr.ecr[-fips].<region>.amazonaws.com[.cn]`."""

FIPS_SUFFIX = "-fips"


@dataclass(frozen=True)
class Registry:
    """An ECR registry identity.

    Attributes:
        id: The AWS account ID owning the registry.
        fips: Whether the registry is addressed through its FIPS endpoint.
        region: The AWS region of the registry.
    """

    id: str
    fips: bool
    region: str


def extract_registry(server_url: str) -> Registry:
    """Extract the ECR registry behind a given server URL.

    A leading `https://` is stripped before matching. The China partition suffix (`.cn`)
    is accepted but not reflected in the result.

    Args:
        server_url (str): registry server URL or hostname
            (e.g. `https://123456789012.dkr.ecr.us-west-2.amazonaws.com`)

    Raises:
        NotECRHostError: if the URL is not an ECR registry host
        MalformedECRHostError: if the URL resembles an ECR host but is incomplete

    Returns:
        Registry: the registry identity
    """
    if server_url.startswith(PROXY_ENDPOINT_SCHEME):
        server_url = server_url[len(PROXY_ENDPOINT_SCHEME) :]

    match = ECR_HOST_PATTERN.search(server_url)
    if match is None:
        raise NotECRHostError(server_url)

    registry_id, fips, region = match.group(1, 2, 3)
    # Unreachable with the current pattern, which requires both groups to be non-empty
    if not registry_id or not region:
        raise MalformedECRHostError(server_url)

    return Registry(id=registry_id, fips=fips == FIPS_SUFFIX, region=region)
