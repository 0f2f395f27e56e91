"""
Deposit, withdrawal, transfer and history endpoints
"""

from fastapi import APIRouter, Depends

from .dependencies import BankingSystem, get_banking_system, get_current_user
from .schemas import DepositRequest, WithdrawRequest, TransferRequest
from ..identity import User


router = APIRouter()


@router.post("/deposit")
async def deposit(
    request: DepositRequest,
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Fund the caller's account"""
    result = system.ledger.deposit(user.id, request.amount, request.payment_method)
    return result.to_response()


@router.post("/withdraw")
async def withdraw(
    request: WithdrawRequest,
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Withdraw from the caller's account"""
    result = system.ledger.withdraw(user.id, request.amount, request.withdrawal_method)
    return result.to_response()


@router.post("/transfer")
async def transfer(
    request: TransferRequest,
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Send funds to another account"""
    result = system.ledger.transfer(user.id, request.recipient_account_number, request.amount)
    return result.to_response()


@router.get("/transactions")
async def list_transactions(
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """The caller's transactions, newest first"""
    return [t.to_public_dict() for t in system.journal.list_for_user(user.id)]


@router.get("/receipts")
async def list_receipts(
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """The caller's receipts, newest first"""
    return [r.to_public_dict() for r in system.receipts.list_for_user(user.id)]
