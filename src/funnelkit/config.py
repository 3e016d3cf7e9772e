import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from funnelkit.constants import AP_TO_AD_RATIO
from funnelkit.models import ViewMode
from funnelkit.utils.logs import report

logger = report.settings(__file__)

DEFAULT_ENV_PATH = Path("config/funnelkit/.env")
DEFAULT_START_DATE = date(2025, 10, 1)
DEFAULT_REPORTS_DIR = Path("data/reports/funnel")


class ConfigError(ValueError):
	"""Raised when an environment setting cannot be parsed."""


@dataclass(frozen=True)
class Settings:
	start_date: date
	ap_to_ad_ratio: float
	default_view: ViewMode
	log_level: str
	reports_dir: Path


def _maybe_load_dotenv(path: Path = DEFAULT_ENV_PATH) -> None:
	if path.exists():
		# Process env wins over the file
		load_dotenv(path, override=False)


def _read_date(name: str, default: date) -> date:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		return date.fromisoformat(raw)
	except ValueError:
		raise ConfigError(f"{name}={raw!r} is not a YYYY-MM-DD date")


def _read_ratio(name: str, default: float) -> float:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		value = float(raw)
	except ValueError:
		raise ConfigError(f"{name}={raw!r} is not a number")
	if value <= 0:
		logger.warning("%s=%s is not positive; downstream AP targets will be zero or negative", name, raw)
	return value


def _read_view(name: str, default: ViewMode) -> ViewMode:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		return ViewMode.parse(raw)
	except ValueError:
		raise ConfigError(f"{name}={raw!r} must be 'net' or 'gross'")


def load_settings(env_path: Path = DEFAULT_ENV_PATH) -> Settings:
	"""Load funnelkit settings from env or optional .env file.
	Order of precedence: process env > .env file > defaults.
	"""
	_maybe_load_dotenv(Path(env_path))
	return Settings(
		start_date=_read_date("FUNNELKIT_START_DATE", DEFAULT_START_DATE),
		ap_to_ad_ratio=_read_ratio("FUNNELKIT_AP_TO_AD_RATIO", AP_TO_AD_RATIO),
		default_view=_read_view("FUNNELKIT_DEFAULT_VIEW", ViewMode.NET),
		log_level=os.getenv("FUNNELKIT_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
		reports_dir=Path(os.getenv("FUNNELKIT_REPORTS_DIR", "").strip() or DEFAULT_REPORTS_DIR),
	)
