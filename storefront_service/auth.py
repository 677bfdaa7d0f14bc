"""
auth.py — Access Gate

User accounts, mock login and bearer tokens.

Passwords are stored and compared in plaintext (mock authentication). Tokens
are HS256-signed JWTs whose `sub` claim is the user id and which expire after
`config.TOKEN_EXPIRE_MINUTES`; `resolve()` keeps the "token in, user out"
contract and returns None for anything it cannot verify.
"""

import logging
from datetime import timedelta
from typing import Optional, Union

from jose import JWTError, jwt

from . import config
from .errors import AuthorizationError, ValidationError
from .models import CreateUserCommand, User, parse_command, utcnow
from .storage import EntityKind, StorageBackend

log = logging.getLogger(__name__)


class AccessGate:

    def __init__(self, storage: StorageBackend, secret_key=None, algorithm=None, expire_minutes=None):
        self.storage = storage
        self.secret_key = secret_key or config.SECRET_KEY
        self.algorithm = algorithm or config.TOKEN_ALGORITHM
        self.expire_minutes = expire_minutes if expire_minutes is not None else config.TOKEN_EXPIRE_MINUTES

    # --- Accounts ---

    def get_user(self, user_id: str) -> Optional[User]:
        return self.storage.get(EntityKind.USER, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        # Emails are not constrained to be unique; first match wins.
        for user in self.storage.scan(EntityKind.USER):
            if user.email == email:
                return user
        return None

    def create_user(self, command: Union[CreateUserCommand, dict]) -> User:
        command = parse_command(CreateUserCommand, command, "user")
        user = User(id=self.storage.new_id(), createdAt=utcnow(), **command.model_dump())
        self.storage.put(EntityKind.USER, user)
        log.info(f"[User: {user.id}] Account created ({user.role}).")
        return user

    def register(self, command: CreateUserCommand) -> User:
        """Self-service sign-up: always a `user` account, email must be unused."""
        if self.get_user_by_email(command.email) is not None:
            raise ValidationError(f"Email {command.email} is already registered")
        return self.create_user(command.model_copy(update={"role": "user"}))

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.get_user_by_email(email)
        if user is None or user.password != password:
            log.warning(f"Failed login attempt for {email}.")
            return None
        return user

    # --- Tokens ---

    def issue_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        expire = utcnow() + (expires_delta or timedelta(minutes=self.expire_minutes))
        return jwt.encode({"sub": user.id, "exp": expire}, self.secret_key, algorithm=self.algorithm)

    def resolve(self, token: Optional[str]) -> Optional[User]:
        """
        Maps a bearer token to its user.

        Returns None if the token is missing, malformed, wrongly signed,
        expired, or names a user that does not exist.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            log.info(f"Rejected bearer token: {e}")
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        return self.get_user(user_id)

    @staticmethod
    def require_role(user: Optional[User], role: str) -> bool:
        return user is not None and user.role == role

    def require(self, token: Optional[str], role: Optional[str] = None) -> User:
        """
        Resolves a token and optionally checks the role of its user.

        Raises:
            AuthorizationError: 401 if the token does not resolve, 403 if the
                user lacks `role`.
        """
        user = self.resolve(token)
        if user is None:
            raise AuthorizationError("Not authenticated")
        if role is not None and not self.require_role(user, role):
            log.warning(f"[User: {user.id}] Denied: role '{role}' required.")
            raise AuthorizationError("Access denied", forbidden=True)
        return user
