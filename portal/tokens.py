import datetime

import bcrypt
import jwt
from flask import current_app, request

from portal.extensions import db
from portal.models import Account


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())


def check_password(password: str, stored_hash) -> bool:
    if not stored_hash:
        return False
    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode("utf-8")
    return bcrypt.checkpw(password.encode("utf-8"), stored_hash)


def issue_token(account: Account) -> str:
    payload = {
        "user_id": account.id,
        "email": account.email,
        "exp": datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def current_account():
    """Account for the request's bearer token, or None when absent/invalid/expired."""
    token = bearer_token()
    if not token:
        return None

    try:
        payload = jwt.decode(
            token, current_app.config["SECRET_KEY"], algorithms=["HS256"]
        )
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("user_id")
    if user_id is None:
        return None
    return db.session.get(Account, user_id)
