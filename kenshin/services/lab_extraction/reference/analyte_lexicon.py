"""
분석 항목 라벨 사전 (reference/analyte_lexicon)
-----------------------------------------------------
- canonical 분석 항목 키 → 라벨 동의어(일본어/영어, OCR 오인식 포함) 순서 목록.
- 사전은 불변 객체(AnalyteLexicon)로 1회 빌드 후 메모리 캐시하며,
  추출기에는 생성자 인자로 주입합니다 (전역 접근 금지).

주요 제공 함수
- build_analyte_lexicon(): 새 AnalyteLexicon 생성
- get_analyte_lexicon(force_rebuild=False): 캐시된 AnalyteLexicon 반환

주의사항
- 매칭은 정규화된 텍스트에 대한 부분 문자열 포함 검사만 수행합니다 (퍼지 매칭 없음).
- "cr", "ua", "tp", "ld" 처럼 짧은 동의어는 다른 단어에도 포함될 수 있으므로
  사용하는 쪽(프로브)의 탐색 순서가 결과에 영향을 줍니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..text_normalizer import probe_key


class AnalyteKey(str, Enum):
    """canonical 분석 항목 키"""
    WBC = "WBC"
    RBC = "RBC"
    HGB = "HGB"
    HCT = "HCT"
    PLT = "PLT"
    AST = "AST"
    ALT = "ALT"
    ALP = "ALP"
    GGT = "GGT"
    LDH = "LDH"
    TP = "TP"
    ALB = "ALB"
    CRE = "CRE"
    EGFR = "eGFR"
    UA = "UA"
    GLU = "GLU"
    HBA1C = "HbA1c"
    LDL = "LDL"
    HDL = "HDL"
    TG = "TG"
    TC = "TC"


# 원본 라벨 데이터 (순서 = 우선순위)
_LABELS: Dict[AnalyteKey, List[str]] = {
    # 혈구
    AnalyteKey.WBC: [
        "白血球", "白血球数",
        "wbc", "wb c", "w b c",
        "white blood cell", "white blood cells",
        "leukocyte", "leukocytes",
        "wbc count", "total wbc",
    ],
    AnalyteKey.RBC: [
        "赤血球", "赤血球数",
        "rbc", "rb c", "r b c",
        "red blood cell", "red blood cells",
        "rbc count", "total rbc",
    ],
    AnalyteKey.HGB: [
        "ヘモグロビン", "血色素", "血色素量",
        "hemoglobin", "hgb", "hb", "hb g/dl", "hb(g/dl)",
    ],
    AnalyteKey.HCT: ["ヘマトクリット", "ヘマトクリット値", "hct", "hematocrit"],
    AnalyteKey.PLT: ["血小板数", "plt", "platelet"],
    # 간
    AnalyteKey.AST: ["ast(got)", "ast", "got"],
    AnalyteKey.ALT: ["alt(gpt)", "alt (gpt)", "alt", "gpt"],
    AnalyteKey.GGT: ["γ-gt", "y-gt", "γgt", "y-gt(y-gtp)", "γ-gtp", "ggt"],
    AnalyteKey.ALP: ["alp ifcc", "alp"],
    AnalyteKey.LDH: ["ld ifcc", "ldh", "ld"],
    # 단백 / 신장 / 요산
    AnalyteKey.TP: ["総蛋白", "総たんぱく", "total protein", "tp"],
    AnalyteKey.ALB: ["アルブミン", "albumin", "alb"],
    AnalyteKey.CRE: ["クレアチニン", "creatinine", "cre", "cr"],
    AnalyteKey.EGFR: ["egfr"],
    AnalyteKey.UA: ["尿酸", "uric acid", "ua"],
    # 대사
    AnalyteKey.GLU: ["グルコース（血糖）", "血糖", "空腹時血糖", "glucose", "glu"],
    AnalyteKey.HBA1C: ["hba1c", "hb a1c", "hba 1c ngsp", "ヘモグロビンa1c", "HbA1c"],
    # 지질
    AnalyteKey.LDL: ["ldlコレステロール", "ldl-c", "ldl"],
    AnalyteKey.HDL: ["hdlコレステロール", "hdl-c", "hdl"],
    AnalyteKey.TG: ["中性脂肪（tg）", "中性脂肪", "トリグリセリド", "triglycerides", "tg"],
    AnalyteKey.TC: ["総コレステロール", "total cholesterol", "tc"],
}


@dataclass(frozen=True)
class AnalyteLexicon:
    """불변 분석 항목 사전

    Attributes:
        labels: 키 → 원문 라벨 동의어 튜플 (읽기 전용 매핑)
        normalized: 키 → 프로브 정규화(probe_key) 적용 동의어 튜플
    """
    labels: Mapping[AnalyteKey, Tuple[str, ...]]
    normalized: Mapping[AnalyteKey, Tuple[str, ...]]

    @property
    def keys(self) -> Tuple[AnalyteKey, ...]:
        return tuple(self.labels.keys())

    def labels_for(self, key: AnalyteKey) -> Tuple[str, ...]:
        return self.labels.get(key, ())

    def normalized_labels_for(self, key: AnalyteKey) -> Tuple[str, ...]:
        return self.normalized.get(key, ())

    def match_key(self, text: str) -> Optional[AnalyteKey]:
        """텍스트에 동의어가 포함된 첫 항목 키 (사전 순서 기준, 없으면 None)"""
        t = probe_key(text)
        if not t:
            return None
        for key, needles in self.normalized.items():
            if any(n in t for n in needles):
                return key
        return None

    def first_line_index(self, key: AnalyteKey, lines: List[str]) -> Optional[int]:
        """동의어 중 하나라도 포함하는 첫 라인 인덱스 (없으면 None)"""
        needles = self.normalized_labels_for(key)
        if not needles:
            return None
        for i, line in enumerate(lines):
            t = probe_key(line)
            if any(n in t for n in needles):
                return i
        return None


# 모듈 전역 캐시
_LEXICON_CACHE: Optional[AnalyteLexicon] = None


def build_analyte_lexicon() -> AnalyteLexicon:
    """사전을 빌드하여 반환합니다."""
    labels = {k: tuple(v) for k, v in _LABELS.items()}
    normalized = {
        k: tuple(dict.fromkeys(probe_key(s) for s in v if probe_key(s)))
        for k, v in _LABELS.items()
    }
    return AnalyteLexicon(
        labels=MappingProxyType(labels),
        normalized=MappingProxyType(normalized),
    )


def get_analyte_lexicon(force_rebuild: bool = False) -> AnalyteLexicon:
    """캐시된 사전을 반환합니다. force_rebuild=True면 다시 빌드합니다."""
    global _LEXICON_CACHE
    if _LEXICON_CACHE is None or force_rebuild:
        _LEXICON_CACHE = build_analyte_lexicon()
    return _LEXICON_CACHE


__all__ = [
    "AnalyteKey",
    "AnalyteLexicon",
    "build_analyte_lexicon",
    "get_analyte_lexicon",
]
