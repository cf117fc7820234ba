import base64
import json
import logging
import time

import httpx
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import AUTH_AUDIENCE, AUTH_CERTS_URL, AUTH_ISSUER
from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer()

# Cache for the identity provider's public certificates
_cached_keys = None

# Allowed clock skew for iat checks
CLOCK_SKEW_SECONDS = 300


async def get_public_keys():
    """Fetch the identity provider's public certificates ({kid: PEM})"""
    global _cached_keys
    if _cached_keys:
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(AUTH_CERTS_URL)
            if response.status_code == 200:
                _cached_keys = response.json()
                logger.info(f"Fetched {len(_cached_keys)} identity provider public keys")
                return _cached_keys
            logger.error(f"Failed to fetch public keys: HTTP {response.status_code}")
    except Exception as e:
        logger.error(f"Error fetching public keys: {str(e)}")
    return None


def _b64decode(segment: str) -> bytes:
    padding_len = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding_len if padding_len != 4 else ""))


async def verify_token(token: str) -> dict:
    """
    Verify an RS256 ID token issued by the identity provider.
    Checks the signature against the provider's certificates, then aud, iss, exp and iat.
    """
    from cryptography.hazmat.primitives import hashes
    from cryptography.hazmat.primitives.asymmetric import padding
    from cryptography.x509 import load_pem_x509_certificate

    if not AUTH_CERTS_URL or not AUTH_AUDIENCE:
        logger.error("Identity provider not configured (AUTH_CERTS_URL / AUTH_AUDIENCE)")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
    except Exception as e:
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256":
        raise HTTPException(status_code=401, detail="Invalid token algorithm")
    if not kid:
        raise HTTPException(status_code=401, detail="Token missing key ID")

    public_keys = await get_public_keys()
    if not public_keys or kid not in public_keys:
        # Keys may have rotated; refetch once
        global _cached_keys
        _cached_keys = None
        public_keys = await get_public_keys()
        if not public_keys or kid not in public_keys:
            logger.error(f"Key ID {kid} not found in public keys after retry")
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    public_key = load_pem_x509_certificate(public_keys[kid].encode()).public_key()

    try:
        signature = _b64decode(signature_b64)
        message = f"{header_b64}.{payload_b64}".encode()
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
    except Exception as e:
        logger.warning(f"Token signature verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    claims = json.loads(_b64decode(payload_b64))

    if claims.get("aud") != AUTH_AUDIENCE:
        raise HTTPException(status_code=401, detail="Invalid token audience")
    if AUTH_ISSUER and claims.get("iss") != AUTH_ISSUER:
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )
    if claims.get("iat", 0) > now + CLOCK_SKEW_SECONDS:
        raise HTTPException(status_code=401, detail="Token issued in the future")

    return claims


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the registered user behind the bearer token"""
    claims = await verify_token(credentials.credentials)

    subject = claims.get("sub")
    if not subject:
        logger.error(f"Token missing subject claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.external_uid == subject).first()
    if not user:
        # Registration happens in the identity service, not here
        logger.warning(f"Authenticated subject {subject} has no registered account")
        raise HTTPException(status_code=401, detail="Account not registered")

    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        logger.warning(f"User {user.id} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
