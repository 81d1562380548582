"""
resilience_radar/services/indicator_matrix.py

Declarative indicator bundles for the four resilience pillars.

This module does not call any APIs. It describes, for each indicator, where
its value comes from, the raw domain that maps onto 0..100, its weight inside
the pillar and whether a larger raw value means lower resilience.

Weights inside a pillar need not sum to 1; the aggregator renormalises over
whatever weight actually resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class SourceKind(str, Enum):
    STATISTICAL = "worldbank"   # WDI series
    GOVERNANCE = "wgi"          # WGI estimates, -2.5..2.5, same WB endpoint
    EVENT_COUNT = "gdelt"       # article count from event search


PROTEST_KEYWORDS: Tuple[str, ...] = ("protest", "riot", "demonstration")


@dataclass(frozen=True)
class IndicatorDescriptor:
    id: str
    label: str
    source: SourceKind
    min: float
    max: float
    weight: float
    code: Optional[str] = None
    invert: bool = False
    per_capita: bool = False
    keywords: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.max <= self.min:
            raise ValueError(f"{self.id}: domain max must exceed min ({self.min}, {self.max})")
        if self.weight <= 0:
            raise ValueError(f"{self.id}: weight must be positive")
        if self.source in (SourceKind.STATISTICAL, SourceKind.GOVERNANCE) and not self.code:
            raise ValueError(f"{self.id}: {self.source.value} indicators need a source code")


D = IndicatorDescriptor

SOCIAL_INDICATORS: Tuple[IndicatorDescriptor, ...] = (
    D("poverty", "Poverty Headcount (extreme)", SourceKind.STATISTICAL, 0, 60, 0.2, code="SI.POV.DDAY", invert=True),
    D("youth_unemp", "Youth Unemployment", SourceKind.STATISTICAL, 0, 50, 0.2, code="SL.UEM.1524.ZS", invert=True),
    D("food_inflation", "Food Inflation", SourceKind.STATISTICAL, 0, 50, 0.2, code="FP.CPI.FOOD.ZG", invert=True),
    D("slum_pop", "Urban Slum Population", SourceKind.STATISTICAL, 0, 80, 0.1, code="EN.POP.SLUM.UR.ZS", invert=True),
    D("voice", "Voice & Accountability", SourceKind.GOVERNANCE, -2.5, 2.5, 0.15, code="VA.EST"),
    D(
        "protest_events",
        "Protest/Riot Events (per 1M)",
        SourceKind.EVENT_COUNT,
        0,
        20,
        0.15,
        invert=True,
        per_capita=True,
        keywords=PROTEST_KEYWORDS,
    ),
)

ECONOMIC_INDICATORS: Tuple[IndicatorDescriptor, ...] = (
    D("reserves_months", "FX Reserves (Months of Imports)", SourceKind.STATISTICAL, 0, 15, 0.3, code="FI.RES.TOTL.MO"),
    D("current_account", "Current Account (% GDP)", SourceKind.STATISTICAL, -15, 15, 0.2, code="BN.CAB.XOKA.GD.ZS"),
    D("external_debt", "External Debt (% GNI)", SourceKind.STATISTICAL, 0, 120, 0.2, code="DT.DOD.DECT.GN.ZS", invert=True),
    D("inflation", "Inflation (CPI)", SourceKind.STATISTICAL, 0, 20, 0.15, code="FP.CPI.TOTL.ZG", invert=True),
    D("unemployment", "Unemployment", SourceKind.STATISTICAL, 0, 25, 0.15, code="SL.UEM.TOTL.ZS", invert=True),
)

INSTITUTIONAL_INDICATORS: Tuple[IndicatorDescriptor, ...] = (
    D("rule_of_law", "Rule of Law", SourceKind.GOVERNANCE, -2.5, 2.5, 0.3, code="RL.EST"),
    D("gov_effectiveness", "Government Effectiveness", SourceKind.GOVERNANCE, -2.5, 2.5, 0.25, code="GE.EST"),
    D("reg_quality", "Regulatory Quality", SourceKind.GOVERNANCE, -2.5, 2.5, 0.15, code="RQ.EST"),
    D("corruption", "Control of Corruption", SourceKind.GOVERNANCE, -2.5, 2.5, 0.2, code="CC.EST"),
    D("political_stability", "Political Stability", SourceKind.GOVERNANCE, -2.5, 2.5, 0.1, code="PV.EST"),
)

INFRASTRUCTURE_INDICATORS: Tuple[IndicatorDescriptor, ...] = (
    D("electricity_access", "Electricity Access", SourceKind.STATISTICAL, 0, 100, 0.3, code="EG.ELC.ACCS.ZS"),
    D("energy_imports", "Energy Import Dependence", SourceKind.STATISTICAL, -20, 100, 0.15, code="EG.IMP.CONS.ZS", invert=True),
    D("logistics", "Logistics Performance Index", SourceKind.STATISTICAL, 1, 5, 0.2, code="LP.LPI.OVRL.XQ"),
    D("internet", "Internet Penetration", SourceKind.STATISTICAL, 0, 100, 0.2, code="IT.NET.USER.ZS"),
    D("water_stress", "Water Stress", SourceKind.STATISTICAL, 0, 100, 0.15, code="ER.H2O.FWST.ZS", invert=True),
)

del D

# Order matters only for presentation
PILLARS: Dict[str, Tuple[IndicatorDescriptor, ...]] = {
    "social": SOCIAL_INDICATORS,
    "economic": ECONOMIC_INDICATORS,
    "institutional": INSTITUTIONAL_INDICATORS,
    "infrastructure": INFRASTRUCTURE_INDICATORS,
}
