"""
Authentication and system dependencies
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..system import BankingSystem
from ..identity import User
from ..security import Principal


security = HTTPBearer(auto_error=False)


def get_banking_system(request: Request) -> BankingSystem:
    return request.app.state.banking_system


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    system: BankingSystem = Depends(get_banking_system)
) -> Principal:
    """Validate the bearer token and return its principal"""
    token = credentials.credentials if credentials else None
    return system.auth.authenticate(token)


def get_current_user(
    principal: Principal = Depends(get_principal),
    system: BankingSystem = Depends(get_banking_system)
) -> User:
    """Load the calling customer's record"""
    return system.auth.require_user(principal)
