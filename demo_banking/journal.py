"""
Transaction Journal Module

Append-only record of every money-movement attempt, applied or status-blocked,
plus admin balance interventions. Entries are never updated; they are only
removed when their owner is deleted.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum
import secrets
import time

from .storage import StorageInterface, StorageRecord
from .money import quantize
from .logging_config import get_logger


class TransactionType(Enum):
    """Types of journal entries"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    ADMIN_DEPOSIT = "admin_deposit"
    ADMIN_BALANCE_EDIT = "admin_balance_edit"


class TransactionStatus(Enum):
    """Outcome recorded on an entry; mirrors the owner's account status"""
    SUCCESSFUL = "Successful"
    PENDING = "Pending"
    FAILED = "Failed"


# Optional detail fields and their wire names
DETAIL_FIELDS = {
    "payment_method": "paymentMethod",
    "withdrawal_method": "withdrawalMethod",
    "recipient_name": "recipientName",
    "recipient_account_number": "recipientAccountNumber",
    "sender_name": "senderName",
    "sender_account_number": "senderAccountNumber",
    "admin_id": "adminId",
    "admin_email": "adminEmail",
    "old_balance": "oldBalance",
    "new_balance": "newBalance",
}


@dataclass
class Transaction(StorageRecord):
    """
    Journal entry owned by a single user
    """
    user_id: str
    transaction_type: TransactionType
    amount: Decimal
    status: TransactionStatus
    description: str
    payment_method: Optional[str] = None
    withdrawal_method: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_account_number: Optional[str] = None
    sender_name: Optional[str] = None
    sender_account_number: Optional[str] = None
    admin_id: Optional[str] = None
    admin_email: Optional[str] = None
    old_balance: Optional[Decimal] = None
    new_balance: Optional[Decimal] = None

    @property
    def timestamp(self) -> datetime:
        return self.created_at

    @property
    def base_id(self) -> str:
        """Shared id of a transfer pair; the id itself for other entries"""
        for suffix in ("_OUT", "_IN"):
            if self.id.endswith(suffix):
                return self.id[:-len(suffix)]
        return self.id

    def to_public_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "userId": self.user_id,
            "type": self.transaction_type.value,
            "amount": float(self.amount),
            "status": self.status.value,
            "timestamp": self.created_at.isoformat(),
            "description": self.description,
        }
        for attr, key in DETAIL_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            result[key] = float(value) if isinstance(value, Decimal) else value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        data = dict(data)
        data['created_at'] = datetime.fromisoformat(data['created_at'])
        data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        data['transaction_type'] = TransactionType(data['transaction_type'])
        data['status'] = TransactionStatus(data['status'])
        data['amount'] = quantize(Decimal(data['amount']))
        for key in ('old_balance', 'new_balance'):
            if data.get(key) is not None:
                data[key] = quantize(Decimal(data[key]))
        return cls(**data)


def generate_transaction_id() -> str:
    """Current time in milliseconds plus a random suffix"""
    return f"TXN{int(time.time() * 1000)}{secrets.randbelow(1000)}"


class TransactionJournal:
    """
    Append-only journal of transactions
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "transactions"
        self.logger = get_logger("demo_banking.journal")

    def record(
        self,
        user_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        status: TransactionStatus,
        description: str,
        transaction_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        **details: Any
    ) -> Transaction:
        """
        Append a journal entry

        Args:
            user_id: Owner of the entry
            transaction_type: Type of entry
            amount: Amount; signed only for admin balance edits
            status: Recorded status
            description: Free-text description
            transaction_id: Explicit id (transfer legs); generated when omitted
            timestamp: Explicit timestamp (transfer legs share one)
            **details: Optional counterparty, method and admin fields

        Returns:
            The persisted Transaction
        """
        now = timestamp or datetime.now(timezone.utc)
        transaction = Transaction(
            id=transaction_id or self._new_id(),
            created_at=now,
            updated_at=now,
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            status=status,
            description=description,
            **details
        )
        self.storage.save(self.table_name, transaction.id, transaction.to_dict())

        self.logger.debug(
            f"Journal entry {transaction.id}: {transaction_type.value} {amount} {status.value}"
        )
        return transaction

    def record_transfer(
        self,
        sender: Any,
        recipient: Any,
        amount: Decimal,
        status: TransactionStatus,
        applied: bool
    ) -> Tuple[str, Transaction, Optional[Transaction]]:
        """
        Record the legs of a transfer under one base id and timestamp

        The recipient leg is written only when the transfer was applied.

        Returns:
            (base id, sender leg, recipient leg or None)
        """
        base_id = self._new_id()
        now = datetime.now(timezone.utc)

        out_description = f"Transfer to {recipient.full_name}"
        if not applied:
            out_description += f" - Account {status.value}"

        outgoing = self.record(
            user_id=sender.id,
            transaction_type=TransactionType.TRANSFER_OUT,
            amount=amount,
            status=status,
            description=out_description,
            transaction_id=f"{base_id}_OUT",
            timestamp=now,
            recipient_name=recipient.full_name,
            recipient_account_number=recipient.account_number
        )

        incoming = None
        if applied:
            incoming = self.record(
                user_id=recipient.id,
                transaction_type=TransactionType.TRANSFER_IN,
                amount=amount,
                status=status,
                description=f"Transfer from {sender.full_name}",
                transaction_id=f"{base_id}_IN",
                timestamp=now,
                sender_name=sender.full_name,
                sender_account_number=sender.account_number
            )

        return base_id, outgoing, incoming

    def get(self, transaction_id: str) -> Optional[Transaction]:
        data = self.storage.load(self.table_name, transaction_id)
        if data:
            return Transaction.from_dict(data)
        return None

    def list_for_user(self, user_id: str) -> List[Transaction]:
        """All entries owned by a user, newest first"""
        entries = [
            Transaction.from_dict(data)
            for data in self.storage.find(self.table_name, {"user_id": user_id})
        ]
        entries.sort(key=lambda t: t.created_at, reverse=True)
        return entries

    def list_all(self) -> List[Transaction]:
        """The full journal, newest first"""
        entries = [Transaction.from_dict(data) for data in self.storage.load_all(self.table_name)]
        entries.sort(key=lambda t: t.created_at, reverse=True)
        return entries

    def delete_for_user(self, user_id: str) -> int:
        """Remove every entry owned by a user; returns the number removed"""
        removed = 0
        for data in self.storage.find(self.table_name, {"user_id": user_id}):
            if self.storage.delete(self.table_name, data["id"]):
                removed += 1
        return removed

    def _new_id(self) -> str:
        while True:
            candidate = generate_transaction_id()
            if not any(
                self.storage.exists(self.table_name, candidate + suffix)
                for suffix in ("", "_OUT", "_IN")
            ):
                return candidate
