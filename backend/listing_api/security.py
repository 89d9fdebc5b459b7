from __future__ import annotations

import datetime as dt

import bcrypt
import jwt

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    # bcrypt stores algorithm + cost + salt in the resulting hash string.
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Invalid hash format.
        return False


class TokenSigner:
    """
    HS256 tokens binding a user id (`sub`). The secret is injected so tests can
    run several signers side by side.
    """

    algorithm = "HS256"

    def __init__(self, secret: str, *, exp_hours: int = 0) -> None:
        self._secret = secret
        self._exp_hours = exp_hours

    def create_access_token(self, *, user_id: int) -> str:
        now = dt.datetime.now(dt.timezone.utc)
        payload: dict = {"sub": str(user_id), "iat": int(now.timestamp())}
        if self._exp_hours:
            payload["exp"] = int((now + dt.timedelta(hours=self._exp_hours)).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> dict:
        return jwt.decode(token, self._secret, algorithms=[self.algorithm])
