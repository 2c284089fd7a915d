"""Bearer-token authentication with Firebase ID tokens.

Routes depend on `get_current_user`. With auth disabled in config every
request runs as the configured development user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import firebase_admin
import structlog
from fastapi import Depends, Header, HTTPException, status
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from yogashna.config.app_config import AuthConfig, load_app_config
from yogashna.db.users_repository import get_or_create_user

logger = structlog.get_logger(__name__)

TokenVerifier = Callable[[str], dict[str, Any]]

_firebase_app: firebase_admin.App | None = None


@dataclass
class AuthenticatedUser:
    """Identity extracted from a verified token."""

    uid: str
    phone_number: str | None = None


def _get_firebase_app(config: AuthConfig) -> firebase_admin.App:
    """Initialize the Firebase Admin app once per process."""
    global _firebase_app

    if _firebase_app is None:
        if config.has_firebase_credentials:
            credential = credentials.Certificate(
                {
                    "type": "service_account",
                    "project_id": config.firebase_project_id,
                    "client_email": config.firebase_client_email,
                    "private_key": config.firebase_private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            )
            options = {"projectId": config.firebase_project_id}
        else:
            credential = credentials.ApplicationDefault()
            options = {}
        _firebase_app = firebase_admin.initialize_app(credential, options)
        logger.info(
            "auth.firebase_initialized",
            service_account=config.has_firebase_credentials,
        )

    return _firebase_app


def verify_firebase_token(token: str) -> dict[str, Any]:
    """Verify a Firebase ID token and return its claims."""
    app = _get_firebase_app(load_app_config().auth)
    return firebase_auth.verify_id_token(token, app=app)


def get_token_verifier() -> TokenVerifier:
    return verify_firebase_token


async def get_current_user(
    authorization: str | None = Header(default=None),
    verify: TokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    """Resolve the caller from the Authorization header.

    Raises:
        HTTPException: 401 when the header is missing or the token is invalid
    """
    auth_config = load_app_config().auth
    if auth_config.disabled:
        return AuthenticatedUser(uid=auth_config.dev_user_uid)

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
        )

    token = authorization[len("Bearer "):].strip()
    try:
        claims = verify(token)
    except Exception as exc:
        logger.info("auth.token_rejected", error=type(exc).__name__)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc

    return AuthenticatedUser(
        uid=str(claims.get("uid") or claims.get("sub")),
        phone_number=claims.get("phone_number"),
    )


def get_current_user_id(user: AuthenticatedUser = Depends(get_current_user)) -> str:
    """Internal id of the caller, creating the user on first access."""
    return get_or_create_user(user.uid, user.phone_number).id
