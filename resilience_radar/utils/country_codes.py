# resilience_radar/utils/country_codes.py
from __future__ import annotations
from typing import Optional, Dict
import re

import pycountry

# Names as the event search expects them; pycountry's official names
# ("Korea, Republic of") match poorly against news text.
_BUILTIN: Dict[str, Dict[str, str]] = {
    "USA": {"name": "United States", "iso_alpha_2": "US", "iso_alpha_3": "USA"},
    "GBR": {"name": "United Kingdom", "iso_alpha_2": "GB", "iso_alpha_3": "GBR"},
    "KOR": {"name": "South Korea", "iso_alpha_2": "KR", "iso_alpha_3": "KOR"},
    "PRK": {"name": "North Korea", "iso_alpha_2": "KP", "iso_alpha_3": "PRK"},
    "RUS": {"name": "Russia", "iso_alpha_2": "RU", "iso_alpha_3": "RUS"},
    "IRN": {"name": "Iran", "iso_alpha_2": "IR", "iso_alpha_3": "IRN"},
    "SYR": {"name": "Syria", "iso_alpha_2": "SY", "iso_alpha_3": "SYR"},
    "VEN": {"name": "Venezuela", "iso_alpha_2": "VE", "iso_alpha_3": "VEN"},
    "BOL": {"name": "Bolivia", "iso_alpha_2": "BO", "iso_alpha_3": "BOL"},
    "TZA": {"name": "Tanzania", "iso_alpha_2": "TZ", "iso_alpha_3": "TZA"},
    "VNM": {"name": "Vietnam", "iso_alpha_2": "VN", "iso_alpha_3": "VNM"},
    "LAO": {"name": "Laos", "iso_alpha_2": "LA", "iso_alpha_3": "LAO"},
    "MDA": {"name": "Moldova", "iso_alpha_2": "MD", "iso_alpha_3": "MDA"},
    "TUR": {"name": "Turkey", "iso_alpha_2": "TR", "iso_alpha_3": "TUR"},
    "COD": {"name": "DR Congo", "iso_alpha_2": "CD", "iso_alpha_3": "COD"},
    "PSE": {"name": "Palestine", "iso_alpha_2": "PS", "iso_alpha_3": "PSE"},
    "XKX": {"name": "Kosovo", "iso_alpha_2": "XK", "iso_alpha_3": "XKX"},
}


def _norm(code: str) -> str:
    return re.sub(r"[\u200b\s]+", "", (code or "")).upper()


def get_country(code: str) -> Optional[Dict[str, str]]:
    """
    Resolve an ISO alpha-3 (or alpha-2) code to {name, iso_alpha_2, iso_alpha_3}.
    Returns None for unknown codes.
    """
    key = _norm(code)
    if not key:
        return None

    if key in _BUILTIN:
        return dict(_BUILTIN[key])

    m = None
    if len(key) == 3:
        m = pycountry.countries.get(alpha_3=key)
    elif len(key) == 2:
        m = pycountry.countries.get(alpha_2=key)
    if m is not None:
        return {
            "name": getattr(m, "common_name", None) or m.name,
            "iso_alpha_2": m.alpha_2,
            "iso_alpha_3": m.alpha_3,
        }

    # alpha-2 caller asking for a builtin alpha-3 entry
    for row in _BUILTIN.values():
        if row["iso_alpha_2"] == key:
            return dict(row)
    return None
