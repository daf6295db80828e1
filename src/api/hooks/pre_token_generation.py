"""
Identity provider pre-token-generation trigger.

Copies the enterprise attributes of the user into the ID token so the
authorization dependencies can read them from provider tokens the same way
they read them from locally issued ones.
"""

import logging

logger = logging.getLogger(__name__)

FORWARDED_ATTRIBUTES = ("isConfirmedByAdmin", "enterpriseType", "role", "eid")


def pre_token_generation_handler(event: dict, context=None) -> dict:
    user_attributes = (event.get("request") or {}).get("userAttributes") or {}

    claims = {}
    for name in FORWARDED_ATTRIBUTES:
        value = user_attributes.get(f"custom:{name}", user_attributes.get(name))
        if value is not None:
            claims[f"custom:{name}"] = value

    logger.info(f"Adding {sorted(claims)} to token for {event.get('userName')}")
    event["response"] = {"claimsOverrideDetails": {"claimsToAddOrOverride": claims}}
    return event
