"""
Receipt Generator Module

Derives a customer-facing receipt from each deposit, withdrawal or transfer
attempt. Admin interventions never produce receipts.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum
import time
import uuid

from .storage import StorageInterface, StorageRecord
from .journal import Transaction, TransactionStatus
from .money import quantize


class ReceiptType(Enum):
    DEPOSIT = "Deposit Receipt"
    WITHDRAWAL = "Withdrawal Receipt"
    TRANSFER = "Transfer Receipt"


@dataclass
class Receipt(StorageRecord):
    transaction_id: str
    user_id: str
    receipt_type: ReceiptType
    amount: Decimal
    status: TransactionStatus
    reference_code: str
    recipient: Optional[str] = None
    recipient_account_number: Optional[str] = None

    @property
    def timestamp(self) -> datetime:
        return self.created_at

    def to_public_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "transactionId": self.transaction_id,
            "userId": self.user_id,
            "type": self.receipt_type.value,
            "amount": float(self.amount),
            "timestamp": self.created_at.isoformat(),
            "status": self.status.value,
            "referenceCode": self.reference_code,
        }
        if self.recipient is not None:
            result["recipient"] = self.recipient
            result["recipientAccountNumber"] = self.recipient_account_number
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Receipt':
        data = dict(data)
        data['created_at'] = datetime.fromisoformat(data['created_at'])
        data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        data['receipt_type'] = ReceiptType(data['receipt_type'])
        data['status'] = TransactionStatus(data['status'])
        data['amount'] = quantize(Decimal(data['amount']))
        return cls(**data)


def generate_reference_code() -> str:
    """Reference derived from emission time in milliseconds"""
    return f"REF{int(time.time() * 1000)}"


class ReceiptGenerator:
    """
    Emits and lists receipts
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "receipts"

    def emit(
        self,
        transaction: Transaction,
        receipt_type: ReceiptType,
        transaction_id: Optional[str] = None,
        **extra: Any
    ) -> Receipt:
        """
        Build and persist a receipt for a journal entry

        Args:
            transaction: Entry the receipt describes
            receipt_type: Human label of the receipt
            transaction_id: Id to reference instead of the entry's own
                (transfers reference the shared base id)
            **extra: recipient / recipient_account_number for transfers
        """
        now = datetime.now(timezone.utc)
        receipt = Receipt(
            id=str(uuid.uuid4()),
            created_at=transaction.created_at,
            updated_at=now,
            transaction_id=transaction_id or transaction.id,
            user_id=transaction.user_id,
            receipt_type=receipt_type,
            amount=transaction.amount,
            status=transaction.status,
            reference_code=generate_reference_code(),
            **extra
        )
        self.storage.save(self.table_name, receipt.id, receipt.to_dict())
        return receipt

    def list_for_user(self, user_id: str) -> List[Receipt]:
        """All receipts owned by a user, newest first"""
        receipts = [
            Receipt.from_dict(data)
            for data in self.storage.find(self.table_name, {"user_id": user_id})
        ]
        receipts.sort(key=lambda r: r.created_at, reverse=True)
        return receipts

    def delete_for_user(self, user_id: str) -> int:
        removed = 0
        for data in self.storage.find(self.table_name, {"user_id": user_id}):
            if self.storage.delete(self.table_name, data["id"]):
                removed += 1
        return removed
