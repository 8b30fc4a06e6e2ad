"""
JWT authentication helpers and middleware for the Flask API.

Tokens are issued by the hospital's auth service with the shared
JWT_SECRET_KEY; this module only reads them.
"""

from datetime import datetime, timedelta
from functools import wraps
from typing import Any, Dict, Optional

import jwt
from flask import request, jsonify

from eeg_workflow.config import SECRET_KEY, TOKEN_ALGORITHM, TOKEN_EXPIRY_HOURS
from eeg_workflow.models import User


def generate_token(user: User, expires_in_hours: int = TOKEN_EXPIRY_HOURS) -> str:
    """Issue a token for ``user`` (development and tests)."""
    payload = {
        "name": user.display_name,
        "role": user.role_label,
        "capabilities": user.capabilities or {},
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(hours=expires_in_hours),
    }
    if user.user_id is not None:
        payload["sub"] = str(user.user_id)
    return jwt.encode(payload, SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def user_from_claims(claims: Dict[str, Any]) -> User:
    """Build the acting User from token claims; odd claim types become 'no grant'."""
    role = claims.get("role")
    capabilities = claims.get("capabilities")
    if isinstance(capabilities, dict):
        capabilities = {str(k): v is True for k, v in capabilities.items()}
    else:
        capabilities = None
    return User(
        role_label=str(role).strip().lower() if role else None,
        capabilities=capabilities,
        user_id=str(claims["sub"]) if claims.get("sub") is not None else None,
        display_name=claims.get("name"),
    )


def token_required(f):
    """Decorator that protects endpoints with JWT authentication."""
    @wraps(f)
    def decorated(*args, **kwargs):
        header = request.headers.get("Authorization")
        if header is not None:
            scheme, _, token = header.partition(" ")
            if scheme.lower() != "bearer" or not token.strip():
                return jsonify({"error": "Invalid authorization header format"}), 401
            token = token.strip()
        else:
            # EventSource and download links cannot set headers.
            token = request.args.get("token")

        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        claims = verify_token(token)
        if not claims:
            return jsonify({"error": "Invalid or expired token"}), 401

        request.current_user = user_from_claims(claims)
        return f(*args, **kwargs)

    return decorated
