# src/core/pricing/__init__.py
"""
Тарификация сегментов поездки.
"""

from src.core.pricing.service import SegmentPricer, SegmentPrice, round_half_up

__all__ = ["SegmentPricer", "SegmentPrice", "round_half_up"]
