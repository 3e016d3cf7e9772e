"""funnelkit command line.

  funnelkit summary        portfolio + per-project delivery
  funnelkit tracker        weekly plan-vs-actual CSV for one project
  funnelkit master-report  one-row-per-project CSV

Without ``--projects`` the built-in demo portfolio is used.
"""

from __future__ import annotations

import argparse
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import List, Optional

from funnelkit.config import ConfigError, Settings, load_settings
from funnelkit.constants import VERTICAL_LABELS, WEEK_COUNT, WEEK_LENGTH_DAYS
from funnelkit.defaults import DEMO_USERS, demo_projects
from funnelkit.models import User, UserRole, ViewMode
from funnelkit.reports.aggregation import summarize_project
from funnelkit.reports.portfolio import summarize_portfolio
from funnelkit.reports.tracker import master_report_frame, weekly_tracker_frame, write_csv
from funnelkit.reports.weeks import report_window
from funnelkit.store import ProjectStore
from funnelkit.utils.logs import report
from funnelkit.utils.style import ansi

logger = report.settings(__file__)


def _parse_date(raw: Optional[str], flag: str) -> Optional[date]:
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise SystemExit(f"Invalid {flag} date format; use YYYY-MM-DD")


def _parse_actor(raw: Optional[str]) -> User:
    if not raw:
        return DEMO_USERS[0]
    role, _, name = raw.partition(":")
    try:
        parsed = UserRole(role.strip().upper())
    except ValueError:
        raise SystemExit(f"--as role must be one of {', '.join(r.value for r in UserRole)}")
    if not name.strip():
        raise SystemExit("--as expects ROLE:NAME, e.g. MANAGER:Amey")
    return User(f"cli-{parsed.value.lower()}", name.strip(), parsed)


def _load_store(ns: argparse.Namespace, settings: Settings) -> ProjectStore:
    if ns.projects:
        path = Path(ns.projects)
        if not path.exists():
            raise SystemExit(f"Projects file not found: {path}")
        try:
            return ProjectStore.from_json(path, default_start=settings.start_date)
        except (ValueError, KeyError, TypeError) as exc:
            raise SystemExit(f"Could not read {path}: {exc}")
    return ProjectStore(demo_projects(settings.start_date))


def _window(ns: argparse.Namespace, project_start: date) -> tuple[int, int]:
    start = _parse_date(ns.start, "--start") or project_start
    end = _parse_date(ns.end, "--end") or project_start + timedelta(days=WEEK_COUNT * WEEK_LENGTH_DAYS - 1)
    if start > end:
        raise SystemExit("--start must be <= --end")
    return report_window(start, end, project_start)


def _fmt_money(value: float) -> str:
    return f"{value:,.0f}"


def cmd_summary(ns: argparse.Namespace, settings: Settings, view: ViewMode) -> int:
    store = _load_store(ns, settings)
    actor = _parse_actor(ns.as_user)
    projects = store.visible_to(actor, ns.poc, settings.ap_to_ad_ratio)
    if not projects:
        print(f"No projects visible to {actor.name} ({actor.role.value}).")
        return 0

    portfolio = summarize_portfolio(projects)
    print(f"{ansi.bold}Portfolio{ansi.reset} ({portfolio.project_count} projects, {view.value} view)")
    print(f"  Planned BV    {portfolio.planned_bv:,.2f} Cr")
    print(f"  Achieved BV   {portfolio.achieved_bv:,.2f} Cr ({portfolio.achievement_pct:.1f}%)")
    print(
        f"  Digital       {portfolio.digital.achieved:,.2f} / {portfolio.digital.target:,.2f} Cr"
        f" (gap {portfolio.digital_deficit:,.2f}, share {portfolio.digital_share_pct:.1f}%)"
    )

    for project in projects:
        first, last = _window(ns, project.start_date)
        s = summarize_project(project, first, last, view)
        lock = " [locked]" if project.is_locked else ""
        print()
        print(f"{ansi.bold}{project.name}{ansi.reset}{lock}  {ansi.grey}SPOC {project.poc}, weeks {first + 1}-{last + 1}{ansi.reset}")
        for label, row in (("Leads", s.period.leads), ("AP", s.period.ap), ("AD", s.period.ad)):
            pct_text = ansi.status(f"{row.delivery_pct:5.1f}% {row.status}", row.status)
            print(f"  {label:<6} {row.achieved:>10,.0f} / {row.target:>10,.0f}  {pct_text}")
        print(f"  Spend  {_fmt_money(s.period.actual_spend)} / {_fmt_money(s.period.plan_spend)}")
        print(f"  CPL    {_fmt_money(s.period.cpl.achieved)} vs target {_fmt_money(s.period.cpl.target)}")
        print(f"  CPW    {_fmt_money(s.period.cpw.achieved)} vs target {_fmt_money(s.period.cpw.target)}")
        for vertical, row in s.lifetime.verticals.items():
            print(
                f"  {VERTICAL_LABELS[vertical]:<14} {row.achieved:8,.2f} / {row.target:8,.2f} Cr"
                f"  ({row.achievement_pct:5.1f}%)"
            )
        b = s.budget
        print(
            f"  Budget received {_fmt_money(b.received)}, spent {_fmt_money(b.total_spends)}"
            f" ({b.percent_spent:.1f}%), pending {_fmt_money(b.pending)}, buffer {_fmt_money(b.buffer)}"
        )
    return 0


def cmd_tracker(ns: argparse.Namespace, settings: Settings, view: ViewMode) -> int:
    store = _load_store(ns, settings)
    project = store.calculated_project(ns.project, settings.ap_to_ad_ratio)
    if project is None:
        raise SystemExit(f"No project with id {ns.project!r}")
    df = weekly_tracker_frame(project, view)
    out = Path(ns.out) if ns.out else settings.reports_dir / f"tracker-{project.id}-{view.value}.csv"
    print(f"Wrote {write_csv(df, out)}")
    return 0


def cmd_master_report(ns: argparse.Namespace, settings: Settings, view: ViewMode) -> int:
    store = _load_store(ns, settings)
    actor = _parse_actor(ns.as_user)
    projects = store.visible_to(actor, ns.poc, settings.ap_to_ad_ratio)
    first, last = _window(ns, settings.start_date)
    df = master_report_frame(projects, first, last, view)
    out = Path(ns.out) if ns.out else settings.reports_dir / f"master-report-{view.value}.csv"
    print(f"Wrote {write_csv(df, out)}")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="funnelkit", description="Campaign funnel planning and tracking")
    p.add_argument("--env", default=None, help="Path to a .env file (default config/funnelkit/.env)")
    p.add_argument("--log-level", default=None, help="Override FUNNELKIT_LOG_LEVEL")
    sub = p.add_subparsers(dest="command", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--projects", default=None, help="Projects JSON snapshot (default: demo portfolio)")
        sp.add_argument("--view", default=None, choices=["net", "gross", "brand", "agency"], help="Financial view")

    def windowed(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--start", default=None, help="Report start date (YYYY-MM-DD)")
        sp.add_argument("--end", default=None, help="Report end date (YYYY-MM-DD)")
        sp.add_argument("--as", dest="as_user", default=None, help="Act as ROLE:NAME, e.g. MANAGER:Amey")
        sp.add_argument("--poc", default=None, help="Only projects for this SPOC")

    s = sub.add_parser("summary", help="Print portfolio and project delivery")
    common(s)
    windowed(s)
    s.set_defaults(func=cmd_summary)

    t = sub.add_parser("tracker", help="Write the weekly tracker CSV for one project")
    common(t)
    t.add_argument("--project", required=True, help="Project id")
    t.add_argument("--out", default=None, help="Output CSV path")
    t.set_defaults(func=cmd_tracker)

    m = sub.add_parser("master-report", help="Write the one-row-per-project CSV")
    common(m)
    windowed(m)
    m.add_argument("--out", default=None, help="Output CSV path")
    m.set_defaults(func=cmd_master_report)
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(argv)
    try:
        settings = load_settings(Path(ns.env)) if ns.env else load_settings()
    except ConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}")
    report.set_level(ns.log_level or settings.log_level)
    view = ViewMode.parse(ns.view) if ns.view else settings.default_view
    return ns.func(ns, settings, view)


if __name__ == "__main__":
    raise SystemExit(main())
