"""
Authentication headers.

The chat API is authenticated with a static bearer token.
"""

from __future__ import annotations

from pydantic import SecretStr


def get_auth_header(api_key: SecretStr | str) -> dict[str, str]:
    """Build the Authorization header for an API key.

    Args:
        api_key: API key, plain or wrapped in SecretStr

    Returns:
        Header dictionary
    """
    if isinstance(api_key, SecretStr):
        api_key = api_key.get_secret_value()
    return {"Authorization": f"Bearer {api_key}"}
