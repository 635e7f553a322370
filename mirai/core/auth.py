"""Identity provider adapter.

Sign-in happens upstream; requests reach this service with the provider's user
id in the ``X-Clerk-User-Id`` header. The profile (name, avatar, email
addresses) is fetched from the provider's backend API.
"""
import logging
from typing import Any, Dict, Optional

import requests
from fastapi import Header, HTTPException

from mirai.core.config import settings
from mirai.core.errors import IdentityProviderError
from mirai.schemas.user import EmailAddress, ExternalIdentity

logger = logging.getLogger(__name__)


def identity_from_payload(payload: Dict[str, Any]) -> ExternalIdentity:
    """Map the provider's snake_case user object onto ExternalIdentity."""
    return ExternalIdentity(
        id=payload["id"],
        firstName=payload.get("first_name"),
        lastName=payload.get("last_name"),
        imageUrl=payload.get("image_url"),
        emailAddresses=[
            EmailAddress(id=e.get("id"), emailAddress=e["email_address"])
            for e in payload.get("email_addresses") or []
            if e.get("email_address")
        ],
        primaryEmailAddressId=payload.get("primary_email_address_id"),
    )


class ClerkClient:
    def __init__(
        self,
        secret_key: str = settings.CLERK_SECRET_KEY,
        api_url: str = settings.CLERK_API_URL,
        timeout: float = settings.CLERK_TIMEOUT_SECONDS,
    ):
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def get_user(self, user_id: str) -> ExternalIdentity:
        try:
            response = requests.get(
                f"{self.api_url}/users/{user_id}",
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return identity_from_payload(response.json())
        except (requests.RequestException, KeyError, ValueError) as e:
            logger.error("Failed to fetch identity %s: %s", user_id, e)
            raise IdentityProviderError(f"Could not load user {user_id} from identity provider") from e


clerk_client = ClerkClient()


def get_external_identity(
    x_clerk_user_id: Optional[str] = Header(None, alias="X-Clerk-User-Id"),
) -> Optional[ExternalIdentity]:
    """FastAPI dependency: the signed-in principal, or None when anonymous."""
    if not x_clerk_user_id:
        return None
    try:
        return clerk_client.get_user(x_clerk_user_id)
    except IdentityProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
