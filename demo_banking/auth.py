"""
Authentication Module

Registration, customer and operator login, and resolution of bearer tokens
to principals and user records.
"""

from dataclasses import dataclass
from typing import Optional
import hmac

from .identity import IdentityStore, User
from .security import PasswordHasher, TokenService, Principal, ADMIN_ROLE
from .exceptions import ValidationError, AuthError, NotFoundError
from .logging_config import get_logger, log_action


@dataclass
class AuthResult:
    token: str
    user: Optional[User] = None
    role: Optional[str] = None


class AuthService:
    """
    Issues tokens for customers and the admin operator
    """

    def __init__(
        self,
        identity: IdentityStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        admin_key: str = "",
        admin_email: str = "",
        admin_password: str = "",
        password_min_length: int = 1
    ):
        self.identity = identity
        self.hasher = hasher
        self.tokens = tokens
        self.admin_key = admin_key
        self.admin_email = admin_email
        self.admin_password = admin_password
        self.password_min_length = password_min_length
        self.logger = get_logger("demo_banking.auth")

    def register(self, full_name: str, username: str, email: str, password: str) -> AuthResult:
        """
        Create a customer and sign them in

        Raises:
            ValidationError: Missing fields, short password, bad email, or
                an email/username that is already taken
        """
        full_name = (full_name or "").strip()
        username = (username or "").strip()
        email = (email or "").strip()
        if not full_name or not username or not email or not password:
            raise ValidationError("All fields are required")
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters"
            )

        user = self.identity.create_user(
            full_name=full_name,
            username=username,
            email=email,
            password_hash=self.hasher.hash(password)
        )

        log_action(self.logger, "info", "User registered", user_id=user.id, action="register")
        return AuthResult(token=self._issue(user), user=user)

    def login(self, identifier: str, password: str) -> AuthResult:
        """
        Sign in with an email or username

        Raises:
            ValidationError: Missing identifier or password
            AuthError: Unknown user, wrong password, or banned account
        """
        if not identifier or not password:
            raise ValidationError("Email/Username and password are required")

        user = self.identity.find_by_identifier(identifier)
        if not user or not self.hasher.verify(password, user.password_hash):
            log_action(
                self.logger, "warning", "Authentication failed",
                action="login_failed", extra={"identifier": identifier}
            )
            raise AuthError("Invalid credentials")
        if user.is_banned:
            log_action(self.logger, "warning", "Banned user refused", user_id=user.id, action="login_failed")
            raise AuthError("Account has been banned")

        log_action(self.logger, "info", "User authenticated", user_id=user.id, action="login")
        return AuthResult(token=self._issue(user), user=user)

    def admin_login(self, admin_key: str, email: str, password: str) -> AuthResult:
        """
        Sign in the operator with the configured key and credentials

        Raises:
            AuthError: Operator credentials are not configured or do not match
        """
        if not (self.admin_key and self.admin_email and self.admin_password):
            raise AuthError("Admin login is not configured")
        if not _same(admin_key, self.admin_key):
            raise AuthError("Invalid admin key")
        if not (_same(email, self.admin_email) and _same(password, self.admin_password)):
            raise AuthError("Invalid admin credentials")

        principal = Principal(subject="admin", email=self.admin_email, role=ADMIN_ROLE)
        log_action(self.logger, "info", "Admin authenticated", user_id="admin", action="admin_login")
        return AuthResult(token=self.tokens.sign(principal.to_claims()), role=ADMIN_ROLE)

    def authenticate(self, token: Optional[str]) -> Principal:
        """Verify a bearer token"""
        if not token:
            raise AuthError("Access token required")
        return Principal.from_claims(self.tokens.verify(token))

    def require_user(self, principal: Principal) -> User:
        """
        Load the customer behind a principal

        Tokens issued before a ban stay cryptographically valid, so the
        account status is checked on every request.
        """
        user = self.identity.get_user(principal.subject)
        if not user:
            raise NotFoundError("User not found")
        if user.is_banned:
            raise AuthError("Account has been banned")
        return user

    def lookup_account(self, account_number: str) -> User:
        user = self.identity.get_by_account_number(account_number)
        if not user:
            raise NotFoundError("Account not found")
        return user

    def _issue(self, user: User) -> str:
        return self.tokens.sign(Principal(subject=user.id, email=user.email).to_claims())


def _same(given: Optional[str], expected: str) -> bool:
    return hmac.compare_digest((given or "").encode(), expected.encode())
