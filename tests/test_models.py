from dataclasses import replace

import pytest

from funnelkit.models import ActualsByWeek, ViewMode, WeeklyActuals, project_from_dict, project_to_dict
from funnelkit.reports.ledger import record_actual


def test_project_is_hashable(horizon, reserve):
    assert hash(horizon) == hash(replace(horizon))
    assert len({horizon, replace(horizon), reserve}) == 2


def test_actuals_are_read_only(horizon):
    assert isinstance(horizon.actuals, ActualsByWeek)
    with pytest.raises(TypeError):
        horizon.actuals[5] = WeeklyActuals(5, leads=1)


def test_edits_keep_actuals_immutable(reserve):
    updated = record_actual(reserve, 2, "leads", 10)
    assert isinstance(updated.actuals, ActualsByWeek)
    assert hash(updated) != hash(reserve)
    assert updated.actuals == {2: WeeklyActuals(2, leads=10)}


def test_snapshot_dict_round_trip(horizon):
    data = project_to_dict(horizon)
    assert data["start_date"] == "2025-10-01"
    assert data["actuals"]["1"]["bookings"] == 1
    assert project_from_dict(data) == horizon


def test_snapshot_needs_start_date(horizon):
    data = project_to_dict(horizon)
    del data["start_date"]
    with pytest.raises(ValueError):
        project_from_dict(data)


def test_view_mode_aliases():
    assert ViewMode.parse("Agency") == ViewMode.GROSS
    assert ViewMode.parse("brand") == ViewMode.NET
    assert ViewMode.parse(ViewMode.GROSS) is ViewMode.GROSS
