"""
Configuration Tests
===================

Validation of settings loaded through pydantic.

Usage:
    pytest test_config.py
"""

import logging

import pytest
from pydantic import ValidationError

import alitheia_logger.config as config_module
from alitheia_logger.config import Config, DELIVERY_POLICIES


def test_defaults_need_no_environment():
    settings = Config(ENABLE_FILE_LOGGING=False)

    assert settings.NAMING_SERVICE_URL == "http://localhost:2809"
    assert settings.LOGGER_OBJECT_NAME == "Logger"
    assert settings.LOGGER_ENDPOINT_URL is None
    assert settings.DEFAULT_CHANNEL == "sqooss"
    assert settings.DELIVERY_POLICY == "local"
    assert settings.validate_configuration() is True


def test_global_instance_is_loaded():
    assert config_module.config.DELIVERY_POLICY in DELIVERY_POLICIES
    assert config_module.DELIVERY_POLICY == config_module.config.DELIVERY_POLICY


def test_urls_are_normalized():
    settings = Config(
        NAMING_SERVICE_URL="https://naming.example:2809/",
        LOGGER_ENDPOINT_URL="http://logger.example/",
        ENABLE_FILE_LOGGING=False
    )
    assert settings.NAMING_SERVICE_URL == "https://naming.example:2809"
    assert settings.LOGGER_ENDPOINT_URL == "http://logger.example"


@pytest.mark.parametrize("field", ["NAMING_SERVICE_URL", "LOGGER_ENDPOINT_URL"])
def test_non_http_urls_are_rejected(field):
    with pytest.raises(ValidationError):
        Config(**{field: "corbaloc::localhost:2809/NameService"})


def test_log_level_is_normalized_and_checked():
    assert Config(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
    with pytest.raises(ValidationError):
        Config(LOG_LEVEL="chatty")


@pytest.mark.parametrize("policy", ["raise", "DROP", "Local", "buffer"])
def test_known_delivery_policies(policy):
    assert Config(DELIVERY_POLICY=policy).DELIVERY_POLICY == policy.lower()


def test_unknown_delivery_policy_is_rejected():
    with pytest.raises(ValidationError):
        Config(DELIVERY_POLICY="retry-forever")


@pytest.mark.parametrize("field", [
    "REMOTE_TIMEOUT", "RETRY_COUNT", "BUFFER_MAX_SIZE",
    "MAX_MESSAGE_LENGTH", "RESOLVER_CACHE_TTL", "CACHE_MAX_SIZE",
])
def test_sizes_and_timeouts_must_be_positive(field):
    with pytest.raises(ValidationError):
        Config(**{field: 0})


def test_delays_may_be_zero_but_not_negative():
    assert Config(RETRY_BASE_DELAY=0).RETRY_BASE_DELAY == 0
    with pytest.raises(ValidationError):
        Config(RETRY_MAX_DELAY=-1)


def test_base_delay_must_not_exceed_max_delay():
    settings = Config(RETRY_BASE_DELAY=20, RETRY_MAX_DELAY=10)
    with pytest.raises(ValueError, match="RETRY_BASE_DELAY"):
        settings.validate_configuration()


def test_blank_object_name_is_rejected():
    settings = Config(LOGGER_OBJECT_NAME="  ")
    with pytest.raises(ValueError, match="LOGGER_OBJECT_NAME"):
        settings.validate_configuration()


def test_directories_are_only_created_for_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    error_file = tmp_path / "errors" / "errors.log"

    Config(ENABLE_FILE_LOGGING=False, LOG_FILE_PATH=str(log_file),
           ERROR_LOG_PATH=str(error_file)).create_directories()
    assert not log_file.parent.exists()

    Config(ENABLE_FILE_LOGGING=True, LOG_FILE_PATH=str(log_file),
           ERROR_LOG_PATH=str(error_file)).create_directories()
    assert log_file.parent.is_dir()
    assert error_file.parent.is_dir()


def test_loading_leaves_logging_and_filesystem_alone(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root_handlers = list(logging.getLogger().handlers)

    config_module.load_configuration()

    assert not (tmp_path / "logs").exists()
    assert logging.getLogger().handlers == root_handlers


def test_library_logger_is_silent_by_default():
    assert Config().ENABLE_FILE_LOGGING is False
    assert any(isinstance(h, logging.NullHandler)
               for h in logging.getLogger("alitheia_logger").handlers)
