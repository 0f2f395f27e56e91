"""
Identity Store Module

Manages user records: registration data, account numbers, balances and
account status. Records are addressable by id, email, username and account
number.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum
import re
import secrets
import uuid

from .storage import StorageInterface, StorageRecord
from .money import ZERO, quantize
from .exceptions import ValidationError, NotFoundError
from .logging_config import get_logger


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class AccountStatus(Enum):
    """Account status as managed by the admin console"""
    ACTIVE = "Active"
    PENDING = "Pending"    # Under review: transactions are recorded, not applied
    FAILED = "Failed"      # Review failed: transactions are recorded, not applied
    BANNED = "Banned"


@dataclass
class User(StorageRecord):
    """
    Bank customer with a single account
    """
    full_name: str
    username: str
    email: str
    password_hash: str
    account_number: str
    balance: Decimal = ZERO
    status: AccountStatus = AccountStatus.ACTIVE
    total_deposits: Decimal = ZERO
    total_withdrawals: Decimal = ZERO
    banned_at: Optional[datetime] = None
    banned_by: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    status_updated_by: Optional[str] = None

    def __post_init__(self):
        if not re.match(EMAIL_PATTERN, self.email):
            raise ValidationError("Invalid email format")
        if not re.match(r'^[1-9]\d{9}$', self.account_number):
            raise ValidationError("Account number must be a 10-digit number")

    @property
    def is_banned(self) -> bool:
        return self.status == AccountStatus.BANNED

    def to_public_dict(self) -> Dict[str, Any]:
        """Sanitized representation without the password digest"""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "username": self.username,
            "email": self.email,
            "accountNumber": self.account_number,
            "balance": float(self.balance),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "totalDeposits": float(self.total_deposits),
            "totalWithdrawals": float(self.total_withdrawals),
        }

    def to_lookup_dict(self) -> Dict[str, Any]:
        """What a counterparty may see before a transfer"""
        return {
            "fullName": self.full_name,
            "accountNumber": self.account_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        data = dict(data)
        for key in ('created_at', 'updated_at', 'banned_at', 'status_updated_at'):
            if isinstance(data.get(key), str):
                data[key] = datetime.fromisoformat(data[key])
        for key in ('balance', 'total_deposits', 'total_withdrawals'):
            data[key] = quantize(Decimal(str(data.get(key) or '0')))
        data['status'] = AccountStatus(data['status'])
        return cls(**data)


class IdentityStore:
    """
    Lookup and persistence of user records
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "users"
        self.logger = get_logger("demo_banking.identity")

    def create_user(
        self,
        full_name: str,
        username: str,
        email: str,
        password_hash: str
    ) -> User:
        """
        Create a user with a zero balance and an Active account

        Raises:
            ValidationError: If the email or username is already registered
        """
        with self.storage.atomic():
            if self.get_by_email(email) or self.get_by_username(username):
                raise ValidationError("User already exists")

            now = datetime.now(timezone.utc)
            user = User(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                full_name=full_name,
                username=username,
                email=email,
                password_hash=password_hash,
                account_number=self._generate_account_number()
            )
            self.storage.save(self.table_name, user.id, user.to_dict())

        self.logger.info(f"User registered: {user.username}")
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        data = self.storage.load(self.table_name, user_id)
        if data:
            return User.from_dict(data)
        return None

    def require_user(self, user_id: str) -> User:
        """Get user by ID or raise NotFoundError"""
        user = self.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self._find_one({"email": email})

    def get_by_username(self, username: str) -> Optional[User]:
        return self._find_one({"username": username})

    def get_by_account_number(self, account_number: str) -> Optional[User]:
        return self._find_one({"account_number": account_number})

    def find_by_identifier(self, identifier: str) -> Optional[User]:
        """Resolve a login identifier that may be an email or a username"""
        return self.get_by_email(identifier) or self.get_by_username(identifier)

    def list_users(self) -> List[User]:
        return [User.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def save_user(self, user: User) -> None:
        user.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.table_name, user.id, user.to_dict())

    def delete_user(self, user_id: str) -> bool:
        return self.storage.delete(self.table_name, user_id)

    def _find_one(self, filters: Dict[str, Any]) -> Optional[User]:
        found = self.storage.find(self.table_name, filters)
        if found:
            return User.from_dict(found[0])
        return None

    def _generate_account_number(self) -> str:
        while True:
            account_number = str(1_000_000_000 + secrets.randbelow(9_000_000_000))
            if not self.storage.find(self.table_name, {"account_number": account_number}):
                return account_number
