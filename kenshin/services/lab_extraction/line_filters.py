"""라인 필터 (기준범위/헤더 라인 판별)"""
from __future__ import annotations

import re

from .text_normalizer import probe_key

# 예: "130-219", "81.1~101.6"
_RANGE_RE = re.compile(r"\d+(?:\.\d+)?\s*[-~]\s*\d+(?:\.\d+)?")

RANGE_OR_HEADER_TOKENS = ("基準", "参考", "範囲", "単位", "検査項目", "検査結果")


def is_range_string(s: str) -> bool:
    return bool(_RANGE_RE.search(s or ""))


def is_range_or_header_line(s: str) -> bool:
    """기준범위/단위/헤더 토큰을 포함하거나 숫자 범위 패턴이 있으면 True"""
    t = probe_key(s)
    if any(tok in t for tok in RANGE_OR_HEADER_TOKENS):
        return True
    return is_range_string(s)


__all__ = ["is_range_string", "is_range_or_header_line", "RANGE_OR_HEADER_TOKENS"]
