"""Authorization token decoding."""

import base64
import binascii

from aibs_informatics_ecr_login.exceptions import InvalidTokenEncodingError, InvalidTokenFormatError
from aibs_informatics_ecr_login.models import ECRCredentials

TOKEN_SEPARATOR = ":"


def extract_token(token: str, proxy_endpoint: str) -> ECRCredentials:
    """Decode an ECR authorization token into docker login credentials.

    The token is the standard base64 encoding of `username:password`. Only the first
    colon separates the two, so passwords may themselves contain colons.

    Args:
        token (str): base64 encoded authorization token
        proxy_endpoint (str): registry endpoint, passed through unchanged

    Raises:
        InvalidTokenEncodingError: if the token is not valid base64
        InvalidTokenFormatError: if the decoded token has no `:` separator

    Returns:
        ECRCredentials: the decoded credentials
    """
    try:
        raw_token = base64.b64decode(token, validate=True)
    except binascii.Error as e:
        raise InvalidTokenEncodingError(f"Invalid token: {e}") from e

    # Only the canonical encoding of the decoded bytes is accepted
    if base64.b64encode(raw_token).decode("ascii") != token:
        raise InvalidTokenEncodingError("Invalid token: not canonical standard base64")

    try:
        decoded_token = raw_token.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidTokenEncodingError(f"Invalid token: {e}") from e

    parts = decoded_token.split(TOKEN_SEPARATOR, 1)
    if len(parts) < 2:
        raise InvalidTokenFormatError(f"Invalid token: expected two parts, got {len(parts)}")

    username, password = parts
    return ECRCredentials(proxy_endpoint=proxy_endpoint, username=username, password=password)
