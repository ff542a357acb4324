import logging
import re
import time
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from verifypro.catalog import ROLES
from verifypro.config import settings
from verifypro.errors import NotAuthenticated, NotAuthorized, ValidationError
from verifypro.gate import LoggedIn, LoggedOut
from verifypro.models.user import User
from verifypro.utils.security import generate_token, hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_credentials(email: str | None, password: str | None, role: str | None):
    if not email:
        raise ValidationError("Email is required", field="email")
    if not EMAIL_RE.match(email):
        raise ValidationError("Enter a valid email address", field="email")
    if not password:
        raise ValidationError("Password is required", field="password")
    if len(password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters",
            field="password",
        )
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}", field="role")


class AuthService:
    def __init__(self):
        self._active_sessions: dict[str, tuple[LoggedIn, float]] = {}  # token -> (session, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_sessions = {
            t: (s, exp) for t, (s, exp) in self._active_sessions.items() if exp > now
        }

    def login(self, db: Session, email: str, password: str, role: str) -> tuple[str, LoggedIn]:
        """Sign in, registering the account on first use of an email."""
        validate_credentials(email, password, role)
        email = email.strip().lower()

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                name=email.split("@")[0],
                role=role,
                password_hash=hash_password(password),
                created_at=now,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info("Registered %s account %s", role, user.id)
        elif not verify_password(user.password_hash, password):
            raise NotAuthenticated("Invalid email or password")
        elif user.role != role:
            raise NotAuthorized(f"This account is registered for the {user.role} portal", field="role")

        session = LoggedIn(id=user.id, role=user.role, name=user.name, email=user.email)
        token = generate_token()
        self._active_sessions[token] = (session, time.time() + settings.session_ttl_seconds)
        return token, session

    def logout(self, token: str):
        self._active_sessions.pop(token, None)

    def resolve(self, token: str | None) -> LoggedIn | LoggedOut:
        if not token:
            return LoggedOut()
        self._cleanup_expired()
        entry = self._active_sessions.get(token)
        if entry is None:
            return LoggedOut()
        session, _ = entry
        self._active_sessions[token] = (session, time.time() + settings.session_ttl_seconds)
        return session

    def clear(self):
        self._active_sessions.clear()


auth_service = AuthService()
