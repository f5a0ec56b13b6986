import logging
import os
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

SUPPORTED_TRIGGERS = {"PostConfirmation_ConfirmSignUp"}
VALID_ROLES = {"job_seeker", "employer"}


def _default_role() -> str | None:
    role = os.getenv("DEFAULT_SIGNUP_ROLE", "").strip()
    if not role:
        return None
    if role not in VALID_ROLES:
        logger.warning("Ignoring invalid DEFAULT_SIGNUP_ROLE=%s", role)
        return None
    return role


def _role_attribute() -> str:
    return os.getenv("COGNITO_ROLE_ATTRIBUTE", "custom:role").strip() or "custom:role"


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:  # noqa: ANN401
    """
    Cognito Post Confirmation trigger handler.

    Gives newly confirmed users a default role when DEFAULT_SIGNUP_ROLE is set.
    Without it the role stays unset and the portal routes the user to /setup.
    Users who already picked a role are left alone.
    """
    trigger = event.get("triggerSource")
    user_pool_id = event.get("userPoolId")
    user_name = event.get("userName")

    logger.info(
        "PostConfirmation trigger received (triggerSource=%s, userPoolId=%s, userName=%s)",
        trigger or "unknown",
        user_pool_id or "unknown",
        user_name or "unknown",
    )

    if trigger not in SUPPORTED_TRIGGERS:
        logger.warning("Unsupported triggerSource %s; leaving event unchanged.", trigger)
        return event

    role = _default_role()
    if role is None:
        return event

    attribute = _role_attribute()
    attributes = (event.get("request") or {}).get("userAttributes") or {}
    if attributes.get(attribute):
        logger.info("User %s already has role %s; not overriding", user_name, attributes[attribute])
        return event

    client = boto3.client("cognito-idp", region_name=event.get("region") or os.getenv("AWS_REGION"))
    try:
        client.admin_update_user_attributes(
            UserPoolId=user_pool_id,
            Username=user_name,
            UserAttributes=[{"Name": attribute, "Value": role}],
        )
    except (ClientError, BotoCoreError):
        # Failing the trigger would block the confirmation; the user lands on /setup instead.
        logger.exception("Failed to assign default role to %s", user_name)
        return event

    logger.info("User %s confirmed with default role: %s", user_name, role)
    return event
