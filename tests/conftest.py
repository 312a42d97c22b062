"""Shared pytest fixtures for callermatch tests."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from callermatch.infrastructure import config_manager as config_module
from callermatch.infrastructure import logger as logger_module


class ListHandler(logging.Handler):
    """Handler that keeps every record it emits."""

    def __init__(self):
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> List[str]:
        return [record.getMessage() for record in self.records]


@pytest.fixture
def list_handler() -> ListHandler:
    """Provide a handler that collects records."""
    return ListHandler()


@pytest.fixture
def app_logger(request, list_handler: ListHandler) -> Generator[logging.Logger, None, None]:
    """Provide an isolated application logger wired to list_handler."""
    logger = logging.getLogger(f"callermatch_tests.{request.node.name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.handlers.clear()
    logger.filters.clear()
    logger.addHandler(list_handler)
    yield logger
    logger.handlers.clear()
    logger.filters.clear()


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample callermatch configuration."""
    return {
        "callermatch": {
            "logging": {
                "level": "DEBUG",
            },
            "filters": {
                "BillingOnly": {
                    "PackageToMatch": "^billing\\.",
                    "MaxCallFrame": 3,
                },
                "NoRetries": {
                    "SubToMatch": "\\.retry$",
                    "AcceptOnMatch": "false",
                    "CallFrame": 1,
                },
            },
        }
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a YAML configuration file."""
    config_path = tmp_path / "callermatch.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def properties_file(tmp_path: Path) -> Path:
    """Create a Log4perl properties file defining one filter."""
    config_path = tmp_path / "log4perl.conf"
    config_path.write_text(
        "# Log4perl configuration\n"
        "log4perl.logger = ALL, A1\n"
        "log4perl.appender.A1        = Log::Log4perl::Appender::TestBuffer\n"
        "log4perl.appender.A1.Filter = MyFilter\n"
        "\n"
        "log4perl.filter.MyFilter                = Log::Log4perl::Filter::CallerMatch\n"
        "log4perl.filter.MyFilter.SubToMatch     = ErrorHandler\n"
        "log4perl.filter.MyFilter.PackageToMatch = ^flux\\.\n"
        "log4perl.filter.MyFilter.StringToMatch  = Operand1\n"
    )
    return config_path


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Reset global logger/config instances and CALLERMATCH_* variables between tests.

    The stdlib "callermatch" logger is restored too, since the CLI installs
    handlers on it.
    """
    for key in list(os.environ):
        if key.startswith("CALLERMATCH_"):
            monkeypatch.delenv(key)

    package_logger = logging.getLogger("callermatch")
    saved_handlers = package_logger.handlers[:]
    saved_level = package_logger.level
    saved_propagate = package_logger.propagate

    logger_module.set_global_logger(None)
    config_module.set_global_config(None)
    yield
    logger_module.set_global_logger(None)
    config_module.set_global_config(None)

    package_logger.handlers[:] = saved_handlers
    package_logger.setLevel(saved_level)
    package_logger.propagate = saved_propagate
