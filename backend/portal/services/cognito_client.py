"""
Wrapper around boto3 Cognito Identity Provider APIs.

Provides a stable, exception-friendly interface for the identity provider
without leaking boto3-specific errors up the stack.
"""
from __future__ import annotations

from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from portal.core.config import settings


class CognitoClientError(Exception):
    """Raised when Cognito returns an error or cannot be reached."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def _require_cognito_client_config(require_user_pool: bool = False) -> None:
    if not settings.COGNITO_REGION:
        raise RuntimeError("COGNITO_REGION is not configured")
    if require_user_pool and not settings.COGNITO_USER_POOL_ID:
        raise RuntimeError("COGNITO_USER_POOL_ID is not configured")


@lru_cache(maxsize=1)
def _get_cognito_client():
    return boto3.client("cognito-idp", region_name=settings.COGNITO_REGION)


def _translate_error(exc: Exception) -> CognitoClientError:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "CognitoClientError")
        message = error.get("Message", str(exc))
        return CognitoClientError(code=code, message=message)
    return CognitoClientError(code="CognitoUnavailable", message=str(exc))


def cognito_get_user(access_token: str) -> dict[str, str]:
    """Fetch the caller's current attributes using their access token."""
    _require_cognito_client_config()
    client = _get_cognito_client()
    try:
        resp = client.get_user(AccessToken=access_token)
    except (ClientError, BotoCoreError) as exc:
        raise _translate_error(exc) from exc

    attributes = {attr["Name"]: attr["Value"] for attr in resp.get("UserAttributes", [])}
    if "Username" not in attributes and resp.get("Username"):
        attributes["Username"] = resp["Username"]
    return attributes


def cognito_admin_set_attribute(*, username: str, name: str, value: str) -> None:
    """Write a single user attribute via AdminUpdateUserAttributes."""
    if not username:
        raise ValueError("username is required to update Cognito attributes")

    _require_cognito_client_config(require_user_pool=True)
    client = _get_cognito_client()
    try:
        client.admin_update_user_attributes(
            UserPoolId=settings.COGNITO_USER_POOL_ID,
            Username=username,
            UserAttributes=[{"Name": name, "Value": value}],
        )
    except (ClientError, BotoCoreError) as exc:
        raise _translate_error(exc) from exc
