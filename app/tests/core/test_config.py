import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError as PydanticValidationError

from app.core.config import BoardConfig, ConfigOverride, Environment, LogLevel, get_config, reset_config


class TestBoardConfig(unittest.TestCase):

    def setUp(self):
        reset_config()

    def tearDown(self):
        reset_config()

    def test_defaults(self):
        config = BoardConfig(_env_file=None)
        self.assertEqual(config.app_name, "LineItemBoard")
        self.assertEqual(config.environment, Environment.DEVELOPMENT)
        self.assertEqual(config.log_level, LogLevel.INFO)
        self.assertEqual(config.api_timeout, 30)
        self.assertFalse(config.is_api_configured())

    def test_reads_prefixed_environment(self):
        env = {
            "LINEITEMBOARD_API_TOKEN": "tok",
            "LINEITEMBOARD_CURRENT_USER_ID": "005xx",
            "LINEITEMBOARD_LOG_LEVEL": "debug",
            "LINEITEMBOARD_ENVIRONMENT": "PRODUCTION",
        }
        with patch.dict(os.environ, env):
            config = BoardConfig(_env_file=None)
        self.assertEqual(config.api_token, "tok")
        self.assertEqual(config.current_user_id, "005xx")
        self.assertEqual(config.log_level, LogLevel.DEBUG)
        self.assertTrue(config.is_production)
        self.assertTrue(config.is_api_configured())

    def test_urls_are_validated_and_trimmed(self):
        config = BoardConfig(_env_file=None, api_base_url="https://org.example.com/")
        self.assertEqual(config.api_base_url, "https://org.example.com")
        with self.assertRaises(PydanticValidationError):
            BoardConfig(_env_file=None, api_base_url="org.example.com")

    def test_timeout_bounds(self):
        with self.assertRaises(PydanticValidationError):
            BoardConfig(_env_file=None, api_timeout=1)

    def test_validate_configuration_lists_missing_settings(self):
        issues = BoardConfig(_env_file=None).validate_configuration()
        self.assertTrue(any("API_TOKEN" in issue for issue in issues))
        self.assertTrue(any("CURRENT_USER_ID" in issue for issue in issues))

    def test_export_redacts_token(self):
        config = BoardConfig(_env_file=None, api_token="secret")
        self.assertEqual(config.export_config()["api_token"], "***REDACTED***")
        self.assertEqual(config.export_config(include_secrets=True)["api_token"], "secret")

    def test_settings_are_plain_attributes(self):
        config = BoardConfig(_env_file=None)
        self.assertEqual(config.app_name, "LineItemBoard")
        self.assertFalse(hasattr(BoardConfig, "get"))

    def test_get_config_is_cached(self):
        self.assertIs(get_config(), get_config())

    def test_config_override(self):
        with ConfigOverride(opportunity_id="006A") as config:
            self.assertEqual(config.opportunity_id, "006A")
            self.assertIs(get_config(), config)


if __name__ == '__main__':
    unittest.main()
