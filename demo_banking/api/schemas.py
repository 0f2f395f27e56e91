"""
Pydantic schemas for API requests
"""

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Account schemas
class RegisterRequest(CamelModel):
    full_name: str = Field(..., alias="fullName")
    username: str
    email: str
    password: str


class LoginRequest(CamelModel):
    email_or_username: str = Field(..., alias="emailOrUsername")
    password: str


class AdminLoginRequest(CamelModel):
    admin_key: str = Field(..., alias="adminKey")
    email: str
    password: str


# Transaction schemas
class DepositRequest(CamelModel):
    amount: Decimal
    payment_method: str = Field(..., alias="paymentMethod")


class WithdrawRequest(CamelModel):
    amount: Decimal
    withdrawal_method: str = Field(..., alias="withdrawalMethod")


class TransferRequest(CamelModel):
    recipient_account_number: str = Field(..., alias="recipientAccountNumber")
    amount: Decimal


# Admin schemas
class UserIdRequest(CamelModel):
    user_id: str = Field(..., alias="userId")


class FundUserRequest(UserIdRequest):
    amount: Decimal


class EditBalanceRequest(UserIdRequest):
    new_balance: Decimal = Field(..., alias="newBalance")


class UpdateStatusRequest(UserIdRequest):
    status: str
