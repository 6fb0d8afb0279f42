"""
BinWatch — Accounts
All authentication goes through the store. No built-in bypass accounts.
"""
import logging

from passlib.context import CryptContext
from pydantic import ValidationError

from config.settings import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_NAME
from store.errors import ValidationFailed, Unauthorized, Forbidden
from store.schemas import User

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def public_user(doc):
    return {
        "id": doc.get("id"),
        "email": doc.get("email"),
        "name": doc.get("name"),
        "userType": doc.get("userType", "public"),
    }


def _new_user(store, email, password, name, user_type):
    try:
        user = User(
            email=email,
            name=name,
            password_hash=pwd_context.hash(password),
            userType=user_type,
        )
    except ValidationError as e:
        raise ValidationFailed(f"invalid_{e.errors()[0]['loc'][0]}")
    return store.insert("user", user.model_dump())


def register(store, email, password, name):
    """Create a public account. Duplicate email raises Conflict."""
    email = (email or "").strip().lower()
    name = (name or "").strip()
    if not email or not password or not name:
        raise ValidationFailed("missing_fields")

    doc = _new_user(store, email, password, name, "public")
    log.info(f"[Auth] Registered {email}")
    return public_user(doc)


def login(store, email, password, user_type=None):
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationFailed("missing_fields")

    user = store.find_one("user", {"email": email})
    if not user or not pwd_context.verify(password, user.get("password_hash", "")):
        log.warning(f"[Auth] Failed login for {email}")
        raise Unauthorized("invalid_credentials")
    if not user.get("is_active", True):
        raise Forbidden("account_disabled")
    if user_type == "admin" and user.get("userType") != "admin":
        raise Forbidden("admin_required")

    log.info(f"[Auth] Login {email} ({user.get('userType')})")
    return public_user(user)


def seed_admin(store, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name=ADMIN_NAME):
    """Create the configured admin account once. Returns the admin, or None if unconfigured."""
    if not password:
        return None
    existing = store.find_one("user", {"email": email.lower()})
    if existing:
        return public_user(existing)
    admin = public_user(_new_user(store, email.lower(), password, name, "admin"))
    log.info(f"[Auth] Default admin {email} created")
    return admin
