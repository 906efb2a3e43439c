"""Data models for ECR login credentials.

Defines the decoded login credentials returned to callers, the cache entry stored per
registry, and the raw token returned by the ECR authorization service.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from aibs_informatics_core.models.base import (
    CustomAwareDateTime,
    SchemaModel,
    StringField,
    custom_field,
)
from aibs_informatics_core.utils.time import get_current_time

DEFAULT_REFRESH_RATIO = 0.5
"""Fraction of a token's lifetime after which a cached token is refreshed."""


@dataclass
class ECRCredentials(SchemaModel):
    """Docker login credentials for an ECR registry.

    Attributes:
        proxy_endpoint: The registry endpoint the credentials are valid for.
        username: The docker login username (typically `AWS`).
        password: The docker login password.
    """

    proxy_endpoint: str = custom_field(mm_field=StringField())
    username: str = custom_field(mm_field=StringField())
    password: str = custom_field(mm_field=StringField())

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"proxy_endpoint={self.proxy_endpoint!r}, username={self.username!r}, password=***)"
        )


@dataclass
class AuthEntry(SchemaModel):
    """A cached ECR authorization token.

    Attributes:
        authorization_token: The base64 encoded `username:password` token.
        requested_at: When the token was requested.
        expires_at: When ECR reported the token to expire.
        proxy_endpoint: The registry endpoint the token is valid for.
    """

    authorization_token: str = custom_field(mm_field=StringField())
    requested_at: datetime = custom_field(mm_field=CustomAwareDateTime())
    expires_at: datetime = custom_field(mm_field=CustomAwareDateTime())
    proxy_endpoint: str = custom_field(mm_field=StringField())

    def get_refresh_time(self, refresh_ratio: float = DEFAULT_REFRESH_RATIO) -> datetime:
        """Compute the time after which this token should no longer be used from cache.

        Tokens are considered stale before they actually expire, leaving a window in which
        a stale (but still accepted) token can be used if ECR cannot be reached.

        Args:
            refresh_ratio (float): fraction of the token lifetime to cut off the end.

        Returns:
            datetime: the refresh time
        """
        valid_window = self.expires_at - self.requested_at
        return self.expires_at - valid_window * refresh_ratio

    def is_valid(
        self, now: Optional[datetime] = None, refresh_ratio: float = DEFAULT_REFRESH_RATIO
    ) -> bool:
        now = now or get_current_time()
        return now < self.get_refresh_time(refresh_ratio)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"proxy_endpoint={self.proxy_endpoint!r}, "
            f"requested_at={self.requested_at}, expires_at={self.expires_at})"
        )


@dataclass
class RawToken:
    """An authorization token as returned by the ECR authorization service."""

    authorization_token: str
    proxy_endpoint: str
    expires_at: datetime
