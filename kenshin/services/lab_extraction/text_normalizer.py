"""OCR 텍스트/숫자 정규화

검사결과지 OCR 텍스트를 비교 가능한 형태로 정규화하고 숫자 토큰을 추출합니다.
모든 추출기(표 추출기, 읽기 순서 프로브)가 이 모듈의 함수만으로 라벨을 비교합니다.
"""
from __future__ import annotations

import re
from typing import List, Optional

# 슬래시 변형 (division slash, fraction slash, 전각 슬래시)
_SLASH_VARIANTS = ("∕", "⁄", "／")
# 그리스 문자 mu → micro sign
_MICRO_VARIANTS = ("μ",)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _fold_symbols(s: str) -> str:
    for ch in _SLASH_VARIANTS:
        s = s.replace(ch, "/")
    for ch in _MICRO_VARIANTS:
        s = s.replace(ch, "µ")
    return s


def compact(s: str) -> str:
    """비교용 축약 정규화

    소문자화, 반각/전각 공백과 개행 제거, 슬래시/마이크로 기호 통일.
    멱등: compact(compact(s)) == compact(s)

    Args:
        s: 원문 텍스트

    Returns:
        정규화된 텍스트
    """
    if not s:
        return ""
    t = s.lower()
    t = t.replace(" ", "").replace("　", "").replace("\n", "")
    return _fold_symbols(t)


def normalize(s: str) -> str:
    """compact와 같지만 공백은 유지 (자유 텍스트 단위 탐지용)"""
    if not s:
        return ""
    return _fold_symbols(s.lower())


def probe_key(s: str) -> str:
    """읽기 순서 프로브용 가벼운 정규화: 소문자화 + 반각/전각 공백 제거"""
    if not s:
        return ""
    return s.lower().replace(" ", "").replace("　", "")


def numbers(s: str) -> List[float]:
    """텍스트에서 부호 있는 정수/소수 토큰을 왼쪽부터 순서대로 추출

    OCR이 소수점을 쉼표로 읽는 경우를 허용하기 위해 ',' 를 '.' 으로 바꾼 뒤 검색합니다.

    Examples:
        >>> numbers("LDL 132, HDL 58, TG 121")
        [132.0, 58.0, 121.0]
    """
    if not s:
        return []
    t = s.replace(",", ".")
    out: List[float] = []
    for m in _NUMBER_RE.finditer(t):
        try:
            out.append(float(m.group(0)))
        except ValueError:
            continue
    return out


def first_number(s: str) -> Optional[float]:
    """numbers(s)의 첫 번째 값 또는 None"""
    vals = numbers(s)
    return vals[0] if vals else None


def is_integer_value(v: float, tol: float = 0.001) -> bool:
    return abs(round(v) - v) < tol


__all__ = [
    "compact",
    "normalize",
    "probe_key",
    "numbers",
    "first_number",
    "is_integer_value",
]
