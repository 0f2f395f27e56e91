"""
Tests for structured logging setup
"""

import json

from demo_banking.logging_config import setup_logging, log_action


class TestSetupLogging:
    """Test handler management and JSON output"""
    
    logger_name = "demo_banking.tests.logging"
    
    def teardown_method(self):
        logger = setup_logging(logger_name=self.logger_name)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
    
    def test_json_lines_written_to_file(self, tmp_path):
        log_file = tmp_path / "bank.log"
        logger = setup_logging("INFO", "json", str(log_file), logger_name=self.logger_name)
        
        log_action(
            logger, "info", "Deposit successful",
            user_id="u1", action="deposit", resource="user:u1",
            extra={"amount": "10.00"}
        )
        logger.handlers[0].flush()
        
        entry = json.loads(log_file.read_text().strip())
        assert entry["message"] == "Deposit successful"
        assert entry["user_id"] == "u1"
        assert entry["action"] == "deposit"
        assert entry["extra"] == {"amount": "10.00"}
    
    def test_reconfigure_closes_previous_handlers(self, tmp_path):
        first = setup_logging(
            log_file=str(tmp_path / "first.log"), logger_name=self.logger_name
        ).handlers[0]
        
        logger = setup_logging(log_file=str(tmp_path / "second.log"), logger_name=self.logger_name)
        
        assert first not in logger.handlers
        assert len(logger.handlers) == 1
        assert first.stream is None
    
    def test_level_applied(self):
        logger = setup_logging("WARNING", "text", logger_name=self.logger_name)
        assert not logger.isEnabledFor(20)
        assert logger.isEnabledFor(30)
