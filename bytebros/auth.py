import time
from dataclasses import dataclass
from typing import Optional, Union

import jwt
from passlib.context import CryptContext

from .exceptions import Forbidden, Unauthenticated

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs;
# bcrypt stays listed so hashes carried over from the previous backend verify.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
EXP_SECONDS = 60 * 60 * 24  # 1 day


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Burn the same time as a real verification when there is no user."""
    pwd_context.dummy_verify()


@dataclass(frozen=True)
class Claims:
    user_id: int
    email: str
    is_admin: bool
    expires_at: int


@dataclass(frozen=True)
class ValidToken:
    claims: Claims


@dataclass(frozen=True)
class InvalidToken:
    reason: str


TokenCheck = Union[ValidToken, InvalidToken]


class TokenSigner:
    """Issues and verifies signed bearer tokens. Holds no mutable state."""

    def __init__(self, secret: str, ttl_seconds: int = EXP_SECONDS, algorithm: str = ALGORITHM):
        self._secret = secret
        self._ttl = ttl_seconds
        self._algorithm = algorithm

    def create_access_token(
        self,
        user_id: int,
        email: str,
        is_admin: Optional[bool] = None,
        expires_delta: Optional[int] = None,
    ) -> str:
        now = int(time.time())
        exp = now + (self._ttl if expires_delta is None else expires_delta)
        payload = {"userId": user_id, "email": email, "iat": now, "exp": exp}
        # registration tokens carry no admin claim
        if is_admin is not None:
            payload["isAdmin"] = bool(is_admin)
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> TokenCheck:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            return InvalidToken("expired")
        except jwt.PyJWTError as e:
            return InvalidToken(f"invalid: {e.__class__.__name__}")

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, int) or not isinstance(email, str):
            return InvalidToken("invalid: missing identity claims")
        return ValidToken(
            Claims(
                user_id=user_id,
                email=email,
                is_admin=bool(payload.get("isAdmin", False)),
                expires_at=int(payload["exp"]),
            )
        )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, or None."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class AuthGate:
    """Fail-closed check run before every protected handler.

    No header (or no bearer token in it) raises Unauthenticated; a token
    that does not verify raises Forbidden. The decision depends only on the
    token, the clock and the signing secret.
    """

    def __init__(self, signer: TokenSigner):
        self._signer = signer

    def authenticate(self, authorization: Optional[str]) -> Claims:
        token = extract_bearer_token(authorization)
        if token is None:
            raise Unauthenticated()
        result = self._signer.verify_access_token(token)
        if isinstance(result, InvalidToken):
            raise Forbidden()
        return result.claims
