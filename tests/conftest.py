"""Root test configuration."""

import logging

import pytest
import structlog

from slogen.plugins.repository import FilePluginRepository, contrib_plugins_path
from slogen.slos.alerts import MWMBAlertGroup
from slogen.slos.models import SLO, Info, Mode

from helpers import make_alert_group, make_slo


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def slo() -> SLO:
    return make_slo()


@pytest.fixture
def alert_group() -> MWMBAlertGroup:
    return make_alert_group()


@pytest.fixture
def info() -> Info:
    return Info(version="v0.1.0", mode=Mode.TEST, spec="prometheus/v1")


@pytest.fixture(scope="session")
def contrib_repo() -> FilePluginRepository:
    return FilePluginRepository([contrib_plugins_path()], strict=True)
