"""검사 단위 모델

단위 토큰 탐지(detect_unit)와 분석 항목별 표준 단위 변환 함수 모음.

- 탐지는 compact 정규화 텍스트에 대한 고정 순서 부분 문자열 검사이며 첫 일치가 이깁니다.
  더 구체적인 토큰을 먼저 검사해야 합니다 (예: "mg/dl" 을 "g/dl" 보다 먼저).
- 변환 함수는 모두 순수 함수 (value, unit) -> 표준 단위 값 입니다.
- 단위를 알 수 없을 때의 크기 기반 추정은 의도된 정책이며 아래 상수로 명시합니다.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple

from .text_normalizer import compact


class LabUnit(str, Enum):
    """인식 가능한 단위 토큰의 닫힌 열거형"""
    MG_DL = "mg/dL"
    G_DL = "g/dL"
    U_L = "U/L"
    PERCENT = "percent"
    PER_UL = "per_uL"
    THOUSAND_PER_UL = "thousand_per_uL"
    MILLION_PER_UL = "million_per_uL"
    TEN_THOUSAND_PER_UL = "ten_thousand_per_uL"
    MMOL_L = "mmol/L"
    CM = "cm"
    KG = "kg"
    MMHG = "mmHg"
    UNKNOWN = "unknown"


# =============================================================================
# 단위 미상 시 크기 기반 추정 정책
# =============================================================================

# 적혈구 값이 이보다 크면 万/µL(10^4/µL) 표기로 보고 ÷100 (예: 452 → 4.52)
RBC_TEN_THOUSAND_GUESS_THRESHOLD = 50.0
# 백혈구/혈소판 값이 이보다 크면 절대 개수(/µL)로 보고 ÷1000 (예: 6200 → 6.2)
ABSOLUTE_COUNT_GUESS_THRESHOLD = 2000.0

# mmol/L → mg/dL 환산 계수 (몰 질량 기반)
GLUCOSE_MMOL_TO_MGDL = 18.0
CHOLESTEROL_MMOL_TO_MGDL = 38.67
TRIGLYCERIDES_MMOL_TO_MGDL = 88.57

# µmol/L → mg/dL 환산 제수
CREATININE_UMOL_PER_MGDL = 88.4
URIC_ACID_UMOL_PER_MGDL = 59.48

_MICROMOLAR_TOKENS = ("µmol/l", "umol/l")

# 탐지 순서 (첫 일치 우선)
_DETECTION_ORDER: List[Tuple[Tuple[str, ...], LabUnit]] = [
    (("mg/dl",), LabUnit.MG_DL),
    (("g/dl",), LabUnit.G_DL),
    (("iu/l", "u/l"), LabUnit.U_L),
    (("%",), LabUnit.PERCENT),
    (("mmol/l",), LabUnit.MMOL_L),
    (("cm",), LabUnit.CM),
    (("kg",), LabUnit.KG),
    (("mmhg", "mmig"), LabUnit.MMHG),
    (("10^6", "mill"), LabUnit.MILLION_PER_UL),
    (("10^3", "k/", "10^9/l"), LabUnit.THOUSAND_PER_UL),
    (("千/µl", "千/ul"), LabUnit.THOUSAND_PER_UL),
    (("万/µl", "万/ul"), LabUnit.TEN_THOUSAND_PER_UL),
    (("10^4/", "10⁴/", "x10^4/"), LabUnit.TEN_THOUSAND_PER_UL),
    (("/µl", "/ul", "cumm"), LabUnit.PER_UL),
]

_DISPLAY: Dict[LabUnit, str] = {
    LabUnit.MG_DL: "mg/dL",
    LabUnit.G_DL: "g/dL",
    LabUnit.U_L: "U/L",
    LabUnit.PERCENT: "%",
    LabUnit.PER_UL: "/µL",
    LabUnit.THOUSAND_PER_UL: "10^3/µL",
    LabUnit.MILLION_PER_UL: "10^6/µL",
    LabUnit.TEN_THOUSAND_PER_UL: "10^4/µL",
    LabUnit.MMOL_L: "mmol/L",
    LabUnit.CM: "cm",
    LabUnit.KG: "kg",
    LabUnit.MMHG: "mmHg",
    LabUnit.UNKNOWN: "",
}


def detect_unit(text: str) -> LabUnit:
    """텍스트에서 단위 토큰 탐지

    Args:
        text: 셀 또는 라인 텍스트 (원문)

    Returns:
        첫 번째로 일치한 LabUnit, 없으면 LabUnit.UNKNOWN
    """
    t = compact(text)
    if not t:
        return LabUnit.UNKNOWN
    for tokens, unit in _DETECTION_ORDER:
        if any(tok in t for tok in tokens):
            return unit
    return LabUnit.UNKNOWN


def describe_unit(unit: LabUnit) -> str:
    """표시용 단위 문자열 (UNKNOWN은 빈 문자열)"""
    return _DISPLAY.get(unit, "")


def has_micromolar(text: str) -> bool:
    t = compact(text)
    return any(tok in t for tok in _MICROMOLAR_TOKENS)


# =============================================================================
# 혈구 변환
# =============================================================================

def rbc_to_million_per_ul(value: float, unit: LabUnit) -> float:
    """적혈구 → 10^6/µL"""
    if unit == LabUnit.MILLION_PER_UL:
        return value
    if unit == LabUnit.TEN_THOUSAND_PER_UL:
        return value / 100.0
    if unit == LabUnit.PER_UL:
        return value / 1_000_000.0
    if unit == LabUnit.UNKNOWN:
        return value / 100.0 if value > RBC_TEN_THOUSAND_GUESS_THRESHOLD else value
    return value


def to_thousand_per_ul(value: float, unit: LabUnit) -> float:
    """백혈구/혈소판 → 10^3/µL"""
    if unit == LabUnit.THOUSAND_PER_UL:
        return value
    if unit == LabUnit.TEN_THOUSAND_PER_UL:
        return value * 10.0
    if unit == LabUnit.PER_UL:
        return value / 1000.0
    if unit == LabUnit.UNKNOWN:
        return value / 1000.0 if value > ABSOLUTE_COUNT_GUESS_THRESHOLD else value
    return value


# =============================================================================
# 대사/지질 변환 (mmol/L → mg/dL)
# =============================================================================

def glucose_to_mgdl(value: float, unit: LabUnit) -> float:
    if unit == LabUnit.MMOL_L:
        return value * GLUCOSE_MMOL_TO_MGDL
    return value


def cholesterol_to_mgdl(value: float, unit: LabUnit) -> float:
    if unit == LabUnit.MMOL_L:
        return value * CHOLESTEROL_MMOL_TO_MGDL
    return value


def triglycerides_to_mgdl(value: float, unit: LabUnit) -> float:
    if unit == LabUnit.MMOL_L:
        return value * TRIGLYCERIDES_MMOL_TO_MGDL
    return value


# =============================================================================
# 신장/요산 변환 (µmol/L → mg/dL)
# =============================================================================
# µmol/L 은 LabUnit 열거형에 없으므로 탐지된 단위가 아니라 주변 텍스트로 판단합니다.

def creatinine_to_mgdl(value: float, context_text: str) -> float:
    if has_micromolar(context_text):
        return value / CREATININE_UMOL_PER_MGDL
    return value


def uric_acid_to_mgdl(value: float, context_text: str) -> float:
    if has_micromolar(context_text):
        return value / URIC_ACID_UMOL_PER_MGDL
    return value


__all__ = [
    "LabUnit",
    "RBC_TEN_THOUSAND_GUESS_THRESHOLD",
    "ABSOLUTE_COUNT_GUESS_THRESHOLD",
    "detect_unit",
    "describe_unit",
    "has_micromolar",
    "rbc_to_million_per_ul",
    "to_thousand_per_ul",
    "glucose_to_mgdl",
    "cholesterol_to_mgdl",
    "triglycerides_to_mgdl",
    "creatinine_to_mgdl",
    "uric_acid_to_mgdl",
]
