"""
Common test fixtures and configurations for pytest.

This module provides reusable fixtures for testing the opkg stanza parser.
Diagnostics are captured through a mocked Logger, and configuration is built
explicitly instead of being read from the environment.
"""

from unittest.mock import MagicMock

import pytest

from core.logger import Logger
from package_managers.opkg.config import ArchConf, Config, ExecConf, FieldConf


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    return MagicMock(spec=Logger)


@pytest.fixture
def exec_config():
    """Execution configuration pinned to non-interactive, test mode."""
    exec_config = ExecConf()
    exec_config.test = True
    exec_config.fetch = False
    exec_config.no_cache = True
    exec_config.interactive = False
    return exec_config


@pytest.fixture
def mock_config(exec_config):
    """
    Config with a small architecture table and no process-wide exclusions.

    This is the main configuration fixture that most tests will use.
    """
    return Config(
        exec_config=exec_config,
        arch_config=ArchConf("all:1,noarch:1,armv7ahf-neon:10"),
        field_config=FieldConf(""),
    )


# Markers for categorizing tests
def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "parser: Parser tests")
