"""분석 항목별 생리학적 타당 범위 (plausibility gate)

기준범위 숫자나 ID 같은 엉뚱한 숫자가 값으로 잡히지 않도록
항목별 닫힌 구간 [low, high] 밖의 값을 후보 단계에서 거부합니다.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .reference.analyte_lexicon import AnalyteKey

PLAUSIBLE_RANGES: Mapping[AnalyteKey, Tuple[float, float]] = MappingProxyType({
    AnalyteKey.GLU: (50.0, 400.0),
    AnalyteKey.HBA1C: (3.5, 14.0),
    AnalyteKey.LDL: (30.0, 300.0),
    AnalyteKey.HDL: (10.0, 150.0),
    AnalyteKey.TG: (20.0, 1000.0),
    AnalyteKey.TC: (70.0, 400.0),
    AnalyteKey.AST: (0.0, 500.0),
    AnalyteKey.ALT: (0.0, 500.0),
    AnalyteKey.ALP: (0.0, 2000.0),
    AnalyteKey.GGT: (0.0, 1000.0),
    AnalyteKey.LDH: (50.0, 2000.0),
    AnalyteKey.TP: (4.0, 9.0),
    AnalyteKey.ALB: (2.0, 6.0),
    AnalyteKey.CRE: (0.3, 5.0),      # mg/dL
    AnalyteKey.EGFR: (5.0, 200.0),
    AnalyteKey.UA: (2.0, 15.0),
    AnalyteKey.HCT: (20.0, 60.0),
    AnalyteKey.PLT: (30.0, 1000.0),  # x10^3/µL
    AnalyteKey.WBC: (0.0, 500.0),
    AnalyteKey.RBC: (0.0, 500.0),
    AnalyteKey.HGB: (0.0, 500.0),
})


def is_plausible(key: AnalyteKey, value: float) -> bool:
    """값이 항목의 닫힌 구간 안에 있으면 True (범위 미정의 항목은 False)"""
    bounds = PLAUSIBLE_RANGES.get(key)
    if bounds is None:
        return False
    low, high = bounds
    return low <= value <= high


__all__ = ["PLAUSIBLE_RANGES", "is_plausible"]
