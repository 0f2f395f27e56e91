"""
Admin console endpoints
"""

from fastapi import APIRouter, Depends

from .dependencies import BankingSystem, get_banking_system, get_principal
from .schemas import (
    AdminLoginRequest, UserIdRequest, FundUserRequest,
    EditBalanceRequest, UpdateStatusRequest
)
from ..security import Principal


router = APIRouter()


@router.post("/login")
async def admin_login(
    request: AdminLoginRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Operator sign-in"""
    result = system.auth.admin_login(request.admin_key, request.email, request.password)
    return {
        "message": "Admin login successful",
        "token": result.token,
        "role": result.role
    }


@router.get("/users")
async def list_users(
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    return [u.to_public_dict() for u in system.admin.list_users(principal)]


@router.get("/transactions")
async def list_all_transactions(
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    return [t.to_public_dict() for t in system.admin.list_transactions(principal)]


@router.post("/fund-user")
async def fund_user(
    request: FundUserRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    change = system.admin.fund_user(principal, request.user_id, request.amount)
    return {
        "message": "User funded successfully",
        "transaction": change.transaction.to_public_dict(),
        "newBalance": float(change.user.balance)
    }


@router.post("/edit-balance")
async def edit_balance(
    request: EditBalanceRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    change = system.admin.edit_balance(principal, request.user_id, request.new_balance)
    return {
        "message": "Balance updated successfully",
        "transaction": change.transaction.to_public_dict(),
        "oldBalance": float(change.old_balance),
        "newBalance": float(change.user.balance)
    }


@router.post("/ban-user")
async def ban_user(
    request: UserIdRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    user = system.admin.ban(principal, request.user_id)
    return {
        "message": "User banned successfully",
        "user": {"id": user.id, "fullName": user.full_name, "status": user.status.value}
    }


@router.post("/unban-user")
async def unban_user(
    request: UserIdRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    user = system.admin.unban(principal, request.user_id)
    return {
        "message": "User unbanned successfully",
        "user": {"id": user.id, "fullName": user.full_name, "status": user.status.value}
    }


@router.delete("/delete-user")
async def delete_user(
    request: UserIdRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    deleted = system.admin.delete_user(principal, request.user_id)
    return {
        "message": "User deleted successfully",
        "deletedUser": {
            "id": deleted.user.id,
            "fullName": deleted.user.full_name,
            "email": deleted.user.email
        }
    }


@router.post("/update-status")
async def update_status(
    request: UpdateStatusRequest,
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    change = system.admin.set_status(principal, request.user_id, request.status)
    return {
        "message": "User status updated successfully",
        "user": {
            "id": change.user.id,
            "fullName": change.user.full_name,
            "oldStatus": change.old_status.value,
            "newStatus": change.user.status.value
        }
    }


@router.get("/stats")
async def get_stats(
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    return system.admin.stats(principal).to_response()
