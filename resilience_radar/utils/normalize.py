# resilience_radar/utils/normalize.py
from __future__ import annotations


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def normalize(value: float, lo: float, hi: float, invert: bool = False) -> float:
    """
    Map a raw indicator value onto 0..100 given its [lo, hi] domain.

    Values outside the domain are clamped first. With invert=True a larger raw
    value scores lower (e.g. unemployment, inflation).
    """
    if hi == lo:
        raise ValueError(f"degenerate domain [{lo}, {hi}]")
    safe = clamp(value, lo, hi)
    scaled = (safe - lo) / (hi - lo) * 100.0
    return 100.0 - scaled if invert else scaled


__all__ = ["clamp", "normalize"]
