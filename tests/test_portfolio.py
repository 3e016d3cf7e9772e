import pytest

from funnelkit.models import User, UserRole
from funnelkit.reports.portfolio import can_see_project, summarize_portfolio, visible_projects


def test_summarize_portfolio(demo):
    p = summarize_portfolio(demo)
    assert p.project_count == 2
    assert p.planned_bv == pytest.approx(850)
    assert p.digital.target == pytest.approx(43.75 + 62.5)
    assert p.digital.achieved == pytest.approx(14)
    assert p.achieved_bv == pytest.approx(28)
    assert p.achievement_pct == pytest.approx(28 / 850 * 100)
    assert p.digital_deficit == pytest.approx(106.25 - 14)
    assert p.digital_share_pct == pytest.approx(50)


def test_empty_portfolio():
    p = summarize_portfolio([])
    assert p.project_count == 0
    assert p.achievement_pct == 0
    assert p.digital_share_pct == 0


def test_visibility(demo, gm, sm, manager):
    assert visible_projects(gm, demo) == demo
    assert visible_projects(sm, demo) == demo
    assert [p.id for p in visible_projects(manager, demo)] == ["1"]
    pratham = User("x", "Pratham", UserRole.MANAGER)
    assert visible_projects(pratham, demo) == []


def test_poc_filter(demo, gm):
    assert [p.id for p in visible_projects(gm, demo, "Rohan")] == ["2"]
    assert visible_projects(gm, demo, "All") == demo


def test_exact_name_match(horizon):
    assert can_see_project(User("x", "Amey", UserRole.MANAGER), horizon)
