"""
Admin Operations Module

Privileged, out-of-band mutations of user records. These bypass the ledger's
status and funds gates entirely; every call requires a principal carrying the
admin role claim.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any

from .storage import StorageInterface
from .identity import IdentityStore, User, AccountStatus
from .journal import TransactionJournal, Transaction, TransactionType, TransactionStatus
from .receipts import ReceiptGenerator
from .security import Principal
from .money import ZERO, positive_amount, to_decimal
from .exceptions import ValidationError, ForbiddenError
from .logging_config import get_logger, log_action


# Statuses an admin may assign directly; Banned goes through ban/unban
ASSIGNABLE_STATUSES = (AccountStatus.ACTIVE, AccountStatus.PENDING, AccountStatus.FAILED)


@dataclass
class BalanceChange:
    user: User
    transaction: Transaction
    old_balance: Decimal


@dataclass
class StatusChange:
    user: User
    old_status: AccountStatus


@dataclass
class DeletedUser:
    user: User
    transactions_removed: int
    receipts_removed: int


@dataclass
class SystemStats:
    total_users: int
    active_users: int
    pending_users: int
    failed_users: int
    banned_users: int
    total_transactions: int
    total_deposits: Decimal
    total_withdrawals: Decimal
    total_transfers: Decimal
    total_balance: Decimal

    def to_response(self) -> Dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "activeUsers": self.active_users,
            "pendingUsers": self.pending_users,
            "failedUsers": self.failed_users,
            "bannedUsers": self.banned_users,
            "totalTransactions": self.total_transactions,
            "totalDeposits": float(self.total_deposits),
            "totalWithdrawals": float(self.total_withdrawals),
            "totalTransfers": float(self.total_transfers),
            "totalBalance": float(self.total_balance),
        }


class AdminOperations:
    """
    Admin console operations
    """

    def __init__(
        self,
        storage: StorageInterface,
        identity: IdentityStore,
        journal: TransactionJournal,
        receipts: ReceiptGenerator
    ):
        self.storage = storage
        self.identity = identity
        self.journal = journal
        self.receipts = receipts
        self.logger = get_logger("demo_banking.admin")

    def list_users(self, actor: Principal) -> List[User]:
        self._require_admin(actor)
        return self.identity.list_users()

    def list_transactions(self, actor: Principal) -> List[Transaction]:
        self._require_admin(actor)
        return self.journal.list_all()

    def fund_user(self, actor: Principal, user_id: str, amount: Any) -> BalanceChange:
        """
        Credit a user unconditionally

        Increases balance and total deposits and journals an admin_deposit
        entry. No receipt is issued.
        """
        self._require_admin(actor)
        amount = positive_amount(amount)

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            old_balance = user.balance
            user.balance += amount
            user.total_deposits += amount
            self.identity.save_user(user)

            transaction = self.journal.record(
                user_id=user.id,
                transaction_type=TransactionType.ADMIN_DEPOSIT,
                amount=amount,
                status=TransactionStatus.SUCCESSFUL,
                description=f"Admin deposit by {actor.email}",
                admin_id=actor.subject,
                admin_email=actor.email
            )

        self._log(actor, "fund_user", user, {"amount": str(amount), "transaction_id": transaction.id})
        return BalanceChange(user=user, transaction=transaction, old_balance=old_balance)

    def edit_balance(self, actor: Principal, user_id: str, new_balance: Any) -> BalanceChange:
        """
        Overwrite a user's balance

        The journal entry's amount is the signed difference between the new
        and old balance. Running totals are left untouched.
        """
        self._require_admin(actor)
        new_balance = to_decimal(new_balance, "balance")
        if new_balance < ZERO:
            raise ValidationError("Invalid balance")

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            old_balance = user.balance
            user.balance = new_balance
            self.identity.save_user(user)

            transaction = self.journal.record(
                user_id=user.id,
                transaction_type=TransactionType.ADMIN_BALANCE_EDIT,
                amount=new_balance - old_balance,
                status=TransactionStatus.SUCCESSFUL,
                description=f"Balance edited by admin {actor.email}",
                admin_id=actor.subject,
                admin_email=actor.email,
                old_balance=old_balance,
                new_balance=new_balance
            )

        self._log(actor, "edit_balance", user, {
            "old_balance": str(old_balance),
            "new_balance": str(new_balance),
        })
        return BalanceChange(user=user, transaction=transaction, old_balance=old_balance)

    def set_status(self, actor: Principal, user_id: str, status: Any) -> StatusChange:
        """Assign Active, Pending or Failed"""
        self._require_admin(actor)
        new_status = self._parse_status(status)

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            old_status = user.status
            user.status = new_status
            user.status_updated_at = datetime.now(timezone.utc)
            user.status_updated_by = actor.email
            self.identity.save_user(user)

        self._log(actor, "set_status", user, {"old_status": old_status.value, "new_status": new_status.value})
        return StatusChange(user=user, old_status=old_status)

    def ban(self, actor: Principal, user_id: str) -> User:
        self._require_admin(actor)

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            user.status = AccountStatus.BANNED
            user.banned_at = datetime.now(timezone.utc)
            user.banned_by = actor.email
            self.identity.save_user(user)

        self._log(actor, "ban", user)
        return user

    def unban(self, actor: Principal, user_id: str) -> User:
        self._require_admin(actor)

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            user.status = AccountStatus.ACTIVE
            user.banned_at = None
            user.banned_by = None
            self.identity.save_user(user)

        self._log(actor, "unban", user)
        return user

    def delete_user(self, actor: Principal, user_id: str) -> DeletedUser:
        """Remove a user together with their transactions and receipts"""
        self._require_admin(actor)

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            self.identity.delete_user(user.id)
            transactions_removed = self.journal.delete_for_user(user.id)
            receipts_removed = self.receipts.delete_for_user(user.id)

        self._log(actor, "delete_user", user, {
            "transactions_removed": transactions_removed,
            "receipts_removed": receipts_removed,
        })
        return DeletedUser(
            user=user,
            transactions_removed=transactions_removed,
            receipts_removed=receipts_removed
        )

    def stats(self, actor: Principal) -> SystemStats:
        """
        Aggregate counts and sums, computed fresh on every call

        Amount totals sum every entry of a type whatever its status: deposits
        include admin deposits, transfers count the outgoing leg once.
        """
        self._require_admin(actor)
        users = self.identity.list_users()
        transactions = self.journal.list_all()

        def status_count(status: AccountStatus) -> int:
            return sum(1 for u in users if u.status == status)

        def amount_sum(*types: TransactionType) -> Decimal:
            return sum(
                (t.amount for t in transactions if t.transaction_type in types),
                ZERO
            )

        return SystemStats(
            total_users=len(users),
            active_users=status_count(AccountStatus.ACTIVE),
            pending_users=status_count(AccountStatus.PENDING),
            failed_users=status_count(AccountStatus.FAILED),
            banned_users=status_count(AccountStatus.BANNED),
            total_transactions=len(transactions),
            total_deposits=amount_sum(TransactionType.DEPOSIT, TransactionType.ADMIN_DEPOSIT),
            total_withdrawals=amount_sum(TransactionType.WITHDRAWAL),
            total_transfers=amount_sum(TransactionType.TRANSFER_OUT),
            total_balance=sum((u.balance for u in users), ZERO)
        )

    def _parse_status(self, status: Any) -> AccountStatus:
        try:
            parsed = status if isinstance(status, AccountStatus) else AccountStatus(status)
        except ValueError:
            parsed = None
        if parsed not in ASSIGNABLE_STATUSES:
            raise ValidationError("Invalid status. Must be Active, Pending, or Failed")
        return parsed

    def _require_admin(self, actor: Optional[Principal]) -> None:
        if actor is None or not actor.is_admin:
            raise ForbiddenError("Admin access required")

    def _log(self, actor: Principal, action: str, user: User, extra: Optional[dict] = None) -> None:
        log_action(
            self.logger, "info", f"Admin {action} on {user.id}",
            user_id=actor.subject, action=action, resource=f"user:{user.id}",
            extra=extra
        )
