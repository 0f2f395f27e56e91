"""
Registration, login and profile endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system, get_current_user
from .schemas import RegisterRequest, LoginRequest
from ..identity import User


router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create an account and sign in"""
    result = system.auth.register(
        full_name=request.full_name,
        username=request.username,
        email=request.email,
        password=request.password
    )
    return {
        "message": "Registration successful",
        "user": result.user.to_public_dict(),
        "token": result.token
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Sign in with an email or username"""
    result = system.auth.login(request.email_or_username, request.password)
    return {
        "message": "Login successful",
        "user": result.user.to_public_dict(),
        "token": result.token
    }


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    """Get the caller's profile"""
    return user.to_public_dict()


@router.get("/user/{account_number}")
async def lookup_account(
    account_number: str,
    user: User = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Resolve a transfer recipient by account number"""
    return system.auth.lookup_account(account_number).to_lookup_dict()
