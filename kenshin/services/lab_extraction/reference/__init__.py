"""참조 데이터 패키지
분석 항목 라벨 사전을 제공합니다.
주요 모듈:
- analyte_lexicon: 분석 항목 키 → 라벨 동의어 사전 (불변, 1회 빌드 후 캐시)
"""
from .analyte_lexicon import (
    AnalyteKey,
    AnalyteLexicon,
    build_analyte_lexicon,
    get_analyte_lexicon,
)
__all__ = [
    "AnalyteKey",
    "AnalyteLexicon",
    "build_analyte_lexicon",
    "get_analyte_lexicon",
]
