"""
Ledger Engine Module

Applies deposits, withdrawals and transfers to user balances. Every operation
runs as one atomic read-modify-write-persist cycle over the identity, journal
and receipt collections.

Accounts under review (Pending or Failed) never move money: the attempt is
journaled and receipted with the account status, and the balance is left as is.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, Optional, Any

from .storage import StorageInterface
from .identity import IdentityStore, User, AccountStatus
from .journal import TransactionJournal, Transaction, TransactionType, TransactionStatus
from .receipts import ReceiptGenerator, Receipt, ReceiptType
from .money import positive_amount
from .exceptions import ValidationError, NotFoundError, InsufficientFundsError, ForbiddenError
from .logging_config import get_logger, log_action


CARD_METHOD = "Card"

# Statuses that record an attempt without applying it
BLOCKING_STATUSES = {
    AccountStatus.PENDING: TransactionStatus.PENDING,
    AccountStatus.FAILED: TransactionStatus.FAILED,
}


@dataclass
class LedgerResult:
    """Outcome of a ledger operation"""
    message: str
    new_balance: Optional[Decimal] = None
    transaction: Optional[Transaction] = None
    receipt: Optional[Receipt] = None
    recipient: Optional[User] = None
    status_blocked: bool = False
    requires_support: bool = False

    def to_response(self) -> Dict[str, Any]:
        response: Dict[str, Any] = {"message": self.message}
        if self.transaction is not None:
            response["transaction"] = self.transaction.to_public_dict()
        if self.receipt is not None:
            response["receipt"] = self.receipt.to_public_dict()
        if self.new_balance is not None:
            response["newBalance"] = float(self.new_balance)
        if self.recipient is not None:
            response["recipient"] = {
                "name": self.recipient.full_name,
                "accountNumber": self.recipient.account_number,
            }
        if self.status_blocked:
            response["statusBlocked"] = True
        if self.requires_support:
            response["requiresSupport"] = True
        return response


class LedgerEngine:
    """
    Customer-initiated money movement with status and funds gates
    """

    def __init__(
        self,
        storage: StorageInterface,
        identity: IdentityStore,
        journal: TransactionJournal,
        receipts: ReceiptGenerator,
        block_banned_accounts: bool = True,
        card_support_message: str = "CONTACT SUPPORT TO COMPLETE DEPOSIT"
    ):
        self.storage = storage
        self.identity = identity
        self.journal = journal
        self.receipts = receipts
        self.block_banned_accounts = block_banned_accounts
        self.card_support_message = card_support_message
        self.logger = get_logger("demo_banking.ledger")

    def deposit(self, user_id: str, amount: Any, method: str) -> LedgerResult:
        """
        Credit a user's account

        A "Card" deposit on an active account is not processed here: it is
        referred to support without touching any store.

        Raises:
            ValidationError: Non-positive amount or missing method
            NotFoundError: Unknown user
            ForbiddenError: Banned account while banned accounts are blocked
        """
        amount = positive_amount(amount)
        method = self._require_method(method, "Payment method")

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            self._check_banned(user)

            blocked_status = BLOCKING_STATUSES.get(user.status)
            if blocked_status:
                transaction = self.journal.record(
                    user_id=user.id,
                    transaction_type=TransactionType.DEPOSIT,
                    amount=amount,
                    status=blocked_status,
                    description=f"Deposit via {method} - Account {user.status.value}",
                    payment_method=method
                )
                receipt = self.receipts.emit(transaction, ReceiptType.DEPOSIT)
                result = self._blocked_result("Deposit", user, transaction, receipt)
            elif method == CARD_METHOD:
                result = LedgerResult(message=self.card_support_message, requires_support=True)
            else:
                user.balance += amount
                user.total_deposits += amount
                self.identity.save_user(user)

                transaction = self.journal.record(
                    user_id=user.id,
                    transaction_type=TransactionType.DEPOSIT,
                    amount=amount,
                    status=TransactionStatus.SUCCESSFUL,
                    description=f"Deposit via {method}",
                    payment_method=method
                )
                receipt = self.receipts.emit(transaction, ReceiptType.DEPOSIT)
                result = LedgerResult(
                    message="Deposit successful",
                    new_balance=user.balance,
                    transaction=transaction,
                    receipt=receipt
                )

        self._log(user, "deposit", amount, result)
        return result

    def withdraw(self, user_id: str, amount: Any, method: str) -> LedgerResult:
        """
        Debit a user's account

        Raises:
            ValidationError: Non-positive amount or missing method
            NotFoundError: Unknown user
            InsufficientFundsError: Active account whose balance is below amount
            ForbiddenError: Banned account while banned accounts are blocked
        """
        amount = positive_amount(amount)
        method = self._require_method(method, "Withdrawal method")

        with self.storage.atomic():
            user = self.identity.require_user(user_id)
            self._check_banned(user)

            blocked_status = BLOCKING_STATUSES.get(user.status)
            if blocked_status:
                transaction = self.journal.record(
                    user_id=user.id,
                    transaction_type=TransactionType.WITHDRAWAL,
                    amount=amount,
                    status=blocked_status,
                    description=f"Withdrawal via {method} - Account {user.status.value}",
                    withdrawal_method=method
                )
                receipt = self.receipts.emit(transaction, ReceiptType.WITHDRAWAL)
                result = self._blocked_result("Withdrawal", user, transaction, receipt)
            else:
                self._check_funds(user, amount)

                user.balance -= amount
                user.total_withdrawals += amount
                self.identity.save_user(user)

                transaction = self.journal.record(
                    user_id=user.id,
                    transaction_type=TransactionType.WITHDRAWAL,
                    amount=amount,
                    status=TransactionStatus.SUCCESSFUL,
                    description=f"Withdrawal via {method}",
                    withdrawal_method=method
                )
                receipt = self.receipts.emit(transaction, ReceiptType.WITHDRAWAL)
                result = LedgerResult(
                    message="Withdrawal successful",
                    new_balance=user.balance,
                    transaction=transaction,
                    receipt=receipt
                )

        self._log(user, "withdraw", amount, result)
        return result

    def transfer(self, sender_id: str, recipient_account_number: str, amount: Any) -> LedgerResult:
        """
        Move funds from the sender to the holder of an account number

        On success both balances change and two journal entries sharing a base
        id and timestamp are written (``_OUT`` for the sender, ``_IN`` for the
        recipient). Only the sender receives a receipt.

        Raises:
            ValidationError: Missing recipient, non-positive amount, or self-transfer
            NotFoundError: Unknown sender or recipient account
            InsufficientFundsError: Active sender whose balance is below amount
            ForbiddenError: Banned sender while banned accounts are blocked
        """
        if not recipient_account_number:
            raise ValidationError("Invalid transfer details")
        amount = positive_amount(amount)

        with self.storage.atomic():
            sender = self.identity.get_user(sender_id)
            if not sender:
                raise NotFoundError("Sender not found")
            recipient = self.identity.get_by_account_number(recipient_account_number)
            if not recipient:
                raise NotFoundError("Recipient account not found")
            if recipient.id == sender.id:
                raise ValidationError("Cannot transfer to your own account")
            self._check_banned(sender)

            blocked_status = BLOCKING_STATUSES.get(sender.status)
            if blocked_status:
                base_id, outgoing, _ = self.journal.record_transfer(
                    sender, recipient, amount, blocked_status, applied=False
                )
                receipt = self._transfer_receipt(base_id, outgoing, recipient)
                result = self._blocked_result("Transfer", sender, outgoing, receipt)
                result.recipient = recipient
            else:
                self._check_funds(sender, amount)

                sender.balance -= amount
                sender.total_withdrawals += amount
                recipient.balance += amount
                recipient.total_deposits += amount
                self.identity.save_user(sender)
                self.identity.save_user(recipient)

                base_id, outgoing, _ = self.journal.record_transfer(
                    sender, recipient, amount, TransactionStatus.SUCCESSFUL, applied=True
                )
                receipt = self._transfer_receipt(base_id, outgoing, recipient)
                result = LedgerResult(
                    message="Transfer successful",
                    new_balance=sender.balance,
                    transaction=outgoing,
                    receipt=receipt,
                    recipient=recipient
                )

        self._log(sender, "transfer", amount, result, counterparty=recipient.id)
        return result

    def _transfer_receipt(self, base_id: str, outgoing: Transaction, recipient: User) -> Receipt:
        return self.receipts.emit(
            outgoing,
            ReceiptType.TRANSFER,
            transaction_id=base_id,
            recipient=recipient.full_name,
            recipient_account_number=recipient.account_number
        )

    def _blocked_result(self, kind: str, user: User, transaction: Transaction,
                        receipt: Receipt) -> LedgerResult:
        status = user.status.value
        return LedgerResult(
            message=f"{kind} {status.lower()} - Account status: {status}",
            new_balance=user.balance,
            transaction=transaction,
            receipt=receipt,
            status_blocked=True
        )

    def _check_banned(self, user: User) -> None:
        if self.block_banned_accounts and user.is_banned:
            raise ForbiddenError("Account is banned")

    def _check_funds(self, user: User, amount: Decimal) -> None:
        if user.balance < amount:
            raise InsufficientFundsError("Insufficient funds")

    def _require_method(self, method: Optional[str], label: str) -> str:
        if not method or not str(method).strip():
            raise ValidationError(f"{label} is required")
        return str(method).strip()

    def _log(self, user: User, action: str, amount: Decimal, result: LedgerResult,
             counterparty: Optional[str] = None) -> None:
        extra = {
            "amount": str(amount),
            "status_blocked": result.status_blocked,
            "requires_support": result.requires_support,
        }
        if result.transaction is not None:
            extra["transaction_id"] = result.transaction.id
        if counterparty:
            extra["counterparty"] = counterparty
        log_action(
            self.logger, "info", result.message,
            user_id=user.id, action=action, resource=f"user:{user.id}",
            extra=extra
        )
