"""
Appwrite identity verification.
"""
from typing import Any, Optional

import jwt
from appwrite.client import Client
from appwrite.exception import AppwriteException
from appwrite.services.account import Account
from appwrite.services.users import Users
from starlette.concurrency import run_in_threadpool

from app.core import config
from app.features.permissions.exceptions import StoreUnavailable
from app.features.permissions.subject import Identity
from app.utils import get_logger


log = get_logger(__name__)


class AppwriteClient:
    """Singleton Appwrite client for server-side operations."""

    _instance: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create the API-key Appwrite client."""
        if cls._instance is None:
            cls._instance = Client()
            cls._instance.set_endpoint(config.APPWRITE_ENDPOINT)
            cls._instance.set_project(config.APPWRITE_PROJECT_ID)
            cls._instance.set_key(config.APPWRITE_API_KEY)
        return cls._instance

    @staticmethod
    def for_jwt(token: str) -> Client:
        """A client acting as the user that owns `token`."""
        client = Client()
        client.set_endpoint(config.APPWRITE_ENDPOINT)
        client.set_project(config.APPWRITE_PROJECT_ID)
        client.set_jwt(token)
        return client


def decode_jwt_token(token: str) -> Optional[dict]:
    """
    Decode an Appwrite JWT and return its payload, or None if it is malformed or expired.

    The signature is not checked here; Appwrite confirms the token in
    AppwriteIdentityProvider when APPWRITE_VERIFY_JWT is on.
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True}
        )
    except jwt.ExpiredSignatureError:
        log.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        log.info(f"Rejected invalid token: {e}")
        return None


def _field(obj: Any, name: str) -> Any:
    # SDK versions return either plain dicts or model objects
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class AppwriteIdentityProvider:
    """
    Identity provider backed by Appwrite JWTs.

    Returns None for missing, malformed, expired or revoked tokens. An
    Appwrite outage (anything other than a 401) raises StoreUnavailable.

    The SDK call runs in a worker thread. When the resolver's lookup timeout
    fires, the request is denied but that thread keeps running until the
    SDK's own HTTP request returns; the SDK exposes no per-call timeout.
    """

    def __init__(self, verify: Optional[bool] = None):
        self.verify = config.APPWRITE_VERIFY_JWT if verify is None else verify

    async def authenticate(self, credentials: Optional[str]) -> Optional[Identity]:
        if not credentials:
            return None

        payload = decode_jwt_token(credentials)
        if payload is None:
            return None

        user_id = payload.get("userId")
        if not user_id:
            log.info("Rejected token without userId claim")
            return None

        if not self.verify:
            return Identity(user_id=user_id, email=payload.get("email", ""))

        account = Account(AppwriteClient.for_jwt(credentials))
        try:
            details = await run_in_threadpool(account.get)
        except AppwriteException as e:
            if e.code == 401:
                log.info(f"Appwrite rejected token for {user_id}")
                return None
            raise StoreUnavailable("appwrite", str(e)) from e

        if _field(details, "$id") != user_id:
            log.warning(f"Token userId {user_id} does not match Appwrite account")
            return None

        return Identity(user_id=user_id, email=_field(details, "email") or "")


async def get_appwrite_user(user_id: str) -> Optional[dict]:
    """
    Get user information from Appwrite.

    Returns:
        {"email": ..., "name": ...} or None if Appwrite has no such user

    Raises:
        StoreUnavailable: If the Appwrite API call fails for another reason
    """
    users = Users(AppwriteClient.get_client())
    try:
        user = await run_in_threadpool(users.get, user_id)
    except AppwriteException as e:
        if e.code == 404:
            return None
        raise StoreUnavailable("appwrite", str(e)) from e

    return {"email": _field(user, "email") or "", "name": _field(user, "name") or ""}
