"""Default plan, media mix and the demo portfolio."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from typing import List, Optional

from funnelkit.models import MediaChannel, PlanningData, Poc, Project, User, UserRole, WeeklyActuals
from funnelkit.reports.weeks import generate_weeks

DEFAULT_PLAN = PlanningData()

DEFAULT_MEDIA_PLAN = (
    MediaChannel("fb", "Meta (FB/Insta)", 40, 4200, 35, 30, 50),
    MediaChannel("google", "Google Search", 30, 3800, 40, 35, 55),
    MediaChannel("display", "Google Display", 10, 2500, 20, 15, 30),
    MediaChannel("portals", "Property Portals", 15, 3200, 45, 40, 60),
    MediaChannel("native", "Native / Others", 5, 5500, 25, 20, 40),
)

DEFAULT_POCS = (
    Poc("1", "Amey"),
    Poc("2", "Rohan"),
    Poc("3", "Pratham"),
)

DEMO_USERS = (
    User("gm-1", "Rohan (Head of Marketing)", UserRole.GM),
    User("sm-1", "Vikram (Cluster Head)", UserRole.SM),
    User("mgr-1", "Amey (Project SPOC)", UserRole.MANAGER),
    User("mgr-2", "Pratham (Project SPOC)", UserRole.MANAGER),
)


def new_project(
    name: str,
    poc: str,
    start_date: date,
    project_id: Optional[str] = None,
    plan: Optional[PlanningData] = None,
    location: str = "New Location",
) -> Project:
    """A fresh project with the default plan, media mix and week curves."""
    return Project(
        id=project_id or uuid.uuid4().hex[:12],
        name=name,
        poc=poc,
        start_date=start_date,
        plan=plan or DEFAULT_PLAN,
        weeks=tuple(generate_weeks(start_date)),
        actuals={},
        media_plan=DEFAULT_MEDIA_PLAN,
        channel_performance=(),
        location=location,
        status="Planning",
    )


def demo_projects(start_date: date) -> List[Project]:
    horizon = new_project(
        "Godrej Horizon",
        "Amey",
        start_date,
        project_id="1",
        plan=replace(DEFAULT_PLAN, overall_bv=350, received_budget=2936003),
        location="Wadala, Mumbai",
    )
    horizon = replace(
        horizon,
        status="Active",
        other_spends=50000.0,
        is_locked=True,
        actuals={
            0: WeeklyActuals(0, leads=38, ap=3, ad=2, spends=137143),
            1: WeeklyActuals(1, leads=76, ap=8, ad=4, spends=274286, bookings=1),
            2: WeeklyActuals(2, leads=115, ap=12, ad=6, spends=400000, bookings=1, presales_bookings=1, referral_bookings=1),
        },
    )
    reserve = new_project(
        "Godrej Reserve",
        "Rohan",
        start_date,
        project_id="2",
        plan=replace(DEFAULT_PLAN, overall_bv=500),
        location="Kandivali, Mumbai",
    )
    return [horizon, reserve]
