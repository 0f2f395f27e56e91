"""
Tests for environment-based configuration
"""

from demo_banking import config as config_module
from demo_banking.config import DemoBankConfig, get_config, reload_config


class TestConfig:
    """Test settings defaults and environment overrides"""
    
    def teardown_method(self):
        reload_config()
    
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEMO_BANK_JWT_SECRET", raising=False)
        settings = DemoBankConfig(_env_file=None)
        
        assert settings.storage_backend == "json"
        assert settings.api_port == 3000
        assert settings.jwt_secret == ""
        assert settings.block_banned_accounts is True
        assert settings.password_min_length == 1
        assert settings.card_support_message == "CONTACT SUPPORT TO COMPLETE DEPOSIT"
    
    def test_reload_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DEMO_BANK_API_PORT", "4100")
        monkeypatch.setenv("DEMO_BANK_BLOCK_BANNED_ACCOUNTS", "false")
        monkeypatch.setenv("DEMO_BANK_STORAGE_BACKEND", "memory")
        
        reloaded = reload_config()
        
        assert reloaded.api_port == 4100
        assert reloaded.block_banned_accounts is False
        assert reloaded.storage_backend == "memory"
        assert get_config() is reloaded
        assert config_module.config is reloaded
