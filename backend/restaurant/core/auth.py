# restaurant/core/auth.py
import logging
from typing import Optional

from fastapi import Request, HTTPException, status
from firebase_admin import auth as fb_auth

from restaurant.config import settings, get_firebase_app
from restaurant.schemas.principal import Principal, ROLES

logger = logging.getLogger("restaurant.auth")

MOCK_PREFIX = "mock_jwt_token_"


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Reads the token from an `Authorization: Bearer <id_token>` header.
    Returns None when the header is missing or malformed.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_id_token(id_token: str) -> dict:
    """
    Verifies a Firebase ID token (revocation checked).
    Mock tokens are accepted only when `allow_mock_tokens` is enabled.
    Invalid/revoked/expired tokens produce 401.
    """
    if settings.allow_mock_tokens and id_token.startswith(MOCK_PREFIX):
        return _decode_mock_token(id_token)

    try:
        return fb_auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=True)
    except fb_auth.ExpiredIdTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except fb_auth.RevokedIdTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session revoked")
    except Exception as exc:
        logger.info("Rejected ID token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid Firebase ID token: {exc}"
        )


def _decode_mock_token(mock_token: str) -> dict:
    """
    Format: mock_jwt_token_<role>_<uid>, e.g. mock_jwt_token_staff_kitchen1
    """
    rest = mock_token[len(MOCK_PREFIX):]
    role, _, uid = rest.partition("_")
    if role not in ROLES or not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid mock token format"
        )
    return {"uid": uid, "email": None, "name": None, "role": role}


def _token_to_principal(decoded: dict) -> Principal:
    """
    Builds a Principal from decoded token claims.
    - custom claim role in (customer, staff, admin) -> that role
    - legacy custom claim admin=True -> 'admin'
    - otherwise -> 'customer'
    """
    uid = decoded.get("uid") or decoded.get("user_id")
    if not uid:
        raise HTTPException(status_code=401, detail="Token missing uid.")

    role = decoded.get("role")
    if role not in ROLES:
        role = "admin" if decoded.get("admin") is True else "customer"

    return Principal(
        uid=uid,
        role=role,
        email=decoded.get("email"),
        display_name=decoded.get("name"),
    )

# --------- FastAPI Dependencies --------- #

async def get_optional_principal(request: Request) -> Optional[Principal]:
    """
    Token optional: verified when present, None otherwise.
    Handy for public GET endpoints.
    """
    token = _extract_bearer_token(request)
    if not token:
        return None
    return _token_to_principal(_decode_id_token(token))


async def get_principal(request: Request) -> Principal:
    """Token required: verifies it and returns the Principal (any role)."""
    token = _extract_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Missing Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_to_principal(_decode_id_token(token))
