"""Fixed domain constants and default planning curves."""

from __future__ import annotations

from typing import Dict, List, Tuple

# Currency-crore -> base currency units
CRORE = 10_000_000

# Rule of thumb: site visits (AP) run at twice confirmed walk-ins (AD).
AP_TO_AD_RATIO = 2.0

WEEK_COUNT = 13
WEEK_LENGTH_DAYS = 7

# Delivery classification thresholds (percent)
ON_TRACK_THRESHOLD = 90.0
AT_RISK_THRESHOLD = 70.0

# Default week seed curves (percentages)
DEFAULT_SPEND_DISTRIBUTION: List[float] = [0, 0, 7, 8, 11, 11, 13, 13, 13, 13, 11, 0, 0]
DEFAULT_LEAD_DISTRIBUTION: List[float] = [0, 0, 7, 8, 11, 11, 13, 13, 13, 13, 11, 0, 0]
DEFAULT_AD_CONVERSION: List[float] = [2.5, 2.5, 3, 3, 2.5, 2.5, 2.5, 2.7, 2.7, 2.7, 3.2, 3, 2.5]

# Acquisition verticals -> (booking field on WeeklyActuals, contribution field on PlanningData)
VERTICALS: Dict[str, Tuple[str, str]] = {
    "digital": ("bookings", "digital_contribution_percent"),
    "presales": ("presales_bookings", "presales_contribution_percent"),
    "brand": ("brand_bookings", "brand_contribution_percent"),
    "referral": ("referral_bookings", "referral_contribution_percent"),
    "cp": ("cp_bookings", "cp_contribution_percent"),
}

VERTICAL_LABELS: Dict[str, str] = {
    "digital": "Digital",
    "presales": "Presales",
    "brand": "Brand",
    "referral": "Referral",
    "cp": "Chan. Partner",
}

# Smart defaults for new media channels, matched on a lowercase substring of the name.
# (keywords, estimated CPL, qualified %)
CHANNEL_PRESETS: List[Tuple[Tuple[str, ...], float, float]] = [
    (("linkedin",), 5500, 60),
    (("youtube",), 1200, 15),
    (("print",), 12000, 25),
    (("hoarding", "ooh"), 50000, 10),
    (("sms", "whatsapp"), 150, 5),
    (("google discovery",), 2200, 25),
    (("native",), 3000, 20),
    (("radio",), 4000, 15),
]
DEFAULT_CHANNEL_CPL = 2500.0
DEFAULT_CHANNEL_CAPI = 30.0
DEFAULT_CAPI_TO_AP = 30.0
DEFAULT_AP_TO_AD = 50.0
