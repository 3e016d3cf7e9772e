from datetime import date

import pytest

from funnelkit.defaults import DEFAULT_PLAN, DEMO_USERS, demo_projects
from funnelkit.reports.weeks import with_derived_weeks
from funnelkit.store import ProjectStore

START = date(2025, 10, 1)

ENV_VARS = (
    "FUNNELKIT_START_DATE",
    "FUNNELKIT_AP_TO_AD_RATIO",
    "FUNNELKIT_DEFAULT_VIEW",
    "FUNNELKIT_LOG_LEVEL",
    "FUNNELKIT_REPORTS_DIR",
)


@pytest.fixture()
def start_date():
    return START


@pytest.fixture()
def plan():
    """350 Cr, ATS 7, 12.5% digital, WTB 6, LTW 3, CPL 4819, tax 18."""
    return DEFAULT_PLAN


@pytest.fixture()
def demo():
    return demo_projects(START)


@pytest.fixture()
def horizon(demo):
    """Locked project with three weeks of actuals."""
    return demo[0]


@pytest.fixture()
def reserve(demo):
    """Unlocked project with no actuals."""
    return demo[1]


@pytest.fixture()
def derived_horizon(horizon):
    return with_derived_weeks(horizon)


@pytest.fixture()
def store(demo):
    return ProjectStore(demo)


@pytest.fixture()
def gm():
    return DEMO_USERS[0]


@pytest.fixture()
def sm():
    return DEMO_USERS[1]


@pytest.fixture()
def manager():
    """Amey, SPOC of the Horizon project."""
    return DEMO_USERS[2]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    """No FUNNELKIT_* variables and a cwd without config/funnelkit/.env.

    Each variable is set then deleted so monkeypatch also removes whatever a
    loaded .env file puts back.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path
