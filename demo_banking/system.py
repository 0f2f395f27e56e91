"""
Banking system wiring

Builds every core component over one shared storage backend.
"""

from typing import Optional

from .storage import StorageInterface, create_storage
from .identity import IdentityStore
from .journal import TransactionJournal
from .receipts import ReceiptGenerator
from .ledger import LedgerEngine
from .admin import AdminOperations
from .auth import AuthService
from .security import PasswordHasher, TokenService
from .config import DemoBankConfig, get_config


class BankingSystem:
    """Core banking system with all components initialized"""
    
    def __init__(self, config: Optional[DemoBankConfig] = None,
                 storage: Optional[StorageInterface] = None,
                 hasher: Optional[PasswordHasher] = None):
        self.config = config or get_config()
        
        # Initialize storage
        self.storage = storage or create_storage(self.config.storage_backend, self.config.data_dir)
        
        # Initialize core components
        self.identity = IdentityStore(self.storage)
        self.journal = TransactionJournal(self.storage)
        self.receipts = ReceiptGenerator(self.storage)
        self.ledger = LedgerEngine(
            self.storage, self.identity, self.journal, self.receipts,
            block_banned_accounts=self.config.block_banned_accounts,
            card_support_message=self.config.card_support_message
        )
        self.admin = AdminOperations(self.storage, self.identity, self.journal, self.receipts)
        self.auth = AuthService(
            self.identity,
            hasher or PasswordHasher(),
            TokenService(
                self.config.jwt_secret,
                algorithm=self.config.jwt_algorithm,
                expiry_hours=self.config.jwt_expiry_hours
            ),
            admin_key=self.config.admin_key,
            admin_email=self.config.admin_email,
            admin_password=self.config.admin_password,
            password_min_length=self.config.password_min_length
        )
    
    def close(self) -> None:
        self.storage.close()
