from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from listing_api.db import session_scope
from listing_api.exceptions import BadPassword, DuplicateEmail, InvalidToken, MissingToken, NotFound, UnknownEmail
from listing_api.models import User
from listing_api.schemas import RegisterIn, UserUpdate
from listing_api.security import TokenSigner, hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


class AuthService:
    def __init__(self, session_factory: sessionmaker[Session], signer: TokenSigner) -> None:
        self._sessions = session_factory
        self._signer = signer

    def register(self, data: RegisterIn) -> tuple[str, User]:
        email = normalize_email(data.email)
        # Hash before touching the DB so the transaction stays short.
        password_hash = hash_password(data.password)
        with session_scope(self._sessions) as db:
            exists = db.execute(select(User.id).where(User.email == email)).scalar_one_or_none()
            if exists is not None:
                raise DuplicateEmail("This email is already registered")
            user = User(
                first_name=data.first_name.strip(),
                last_name=data.last_name.strip(),
                email=email,
                phone_number=data.phone_number.strip(),
                profile_pic_url=(data.profile_pic_url or "").strip() or None,
                password_hash=password_hash,
                liked_properties=[],
            )
            db.add(user)
            try:
                db.flush()
            except IntegrityError:
                # Concurrent double-submit slipped past the pre-check; the unique index caught it.
                raise DuplicateEmail("This email is already registered")
        logger.info("Registered user_id=%s", user.id)
        return self._signer.create_access_token(user_id=user.id), user

    def login(self, email: str, password: str) -> tuple[str, User]:
        with session_scope(self._sessions) as db:
            user = db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()
        if user is None:
            raise UnknownEmail("Incorrect email")
        if not verify_password(password, user.password_hash):
            raise BadPassword("Incorrect password")
        return self._signer.create_access_token(user_id=user.id), user

    def validate_token(self, authorization: str | None) -> int:
        """
        Return the user id bound to a `Bearer <token>` header.
        """
        if not (authorization or "").strip():
            raise MissingToken("No token provided")
        token = bearer_token(authorization)
        if not token:
            raise InvalidToken("Malformed Authorization header")
        try:
            payload = self._signer.decode_access_token(token)
            return int(payload["sub"])
        except Exception as e:
            raise InvalidToken("Invalid token") from e

    def get_profile(self, user_id: int) -> User:
        with session_scope(self._sessions) as db:
            user = db.get(User, user_id)
            if user is None:
                raise NotFound("Can't find user")
            return user

    def update_profile(self, user_id: int, patch: UserUpdate) -> User:
        changes = patch.model_dump(exclude_unset=True)
        with session_scope(self._sessions) as db:
            user = db.get(User, user_id)
            if user is None:
                raise NotFound("User not found")
            for field, value in changes.items():
                if value is None and field != "profile_pic_url":
                    continue
                if field == "liked_properties":
                    # Unordered set of ids; keep first-seen order for stable output.
                    value = list(dict.fromkeys(value or []))
                elif isinstance(value, str):
                    value = value.strip()
                setattr(user, field, value)
            db.add(user)
            return user
