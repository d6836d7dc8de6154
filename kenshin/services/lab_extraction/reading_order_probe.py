"""읽기 순서 프로브 (표가 없을 때의 최후 추출 경로)

표 구조 없이 읽기 순서 텍스트 라인만으로 분석 항목 값을 찾습니다.

전략: 라벨 → 가장 가까운 숫자 (단위 유무 + 타당 범위로 게이트)
1) 지질 묶음(LipidBundleExtractor) 먼저 실행 - 그 결과는 이후 단계가 덮어쓰지 않음
2) 항목별로 사전 동의어가 처음 나오는 라인을 찾고, 그 라인부터 lookahead 줄 안의 숫자에 점수를 매김
   score = 1/(1+offset) + (라인에 단위가 있으면 1.0) + (지질 항목이고 정수값이면 0.1)
3) 기준범위/헤더 라인은 건너뜀, 점수가 더 클 때만 교체
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from kenshin.models.envelopes import CheckupPatch, DocumentData

from .line_filters import is_range_or_header_line
from .lipid_bundle import LipidBundleExtractor, ProbeCandidate
from .plausibility import is_plausible
from .reference.analyte_lexicon import AnalyteKey, AnalyteLexicon
from .text_normalizer import is_integer_value, numbers
from .unit_model import LabUnit, describe_unit, detect_unit

logger = logging.getLogger(__name__)

_LIPIDS = (AnalyteKey.LDL, AnalyteKey.HDL, AnalyteKey.TG, AnalyteKey.TC)


@dataclass(frozen=True)
class ProbeResult:
    """프로브 결과 (항목 키 기준 정렬되어 반환)"""
    key: str
    label: str
    value: float
    unit: LabUnit
    value_line: int
    label_line: int


@dataclass
class Settings:
    """프로브 설정값.

    - lookahead: 라벨 라인 이후 탐색할 줄 수 (라벨 라인 포함 0..lookahead)
    - capture_order: 일반 탐색 순서 (지질 묶음 이후)
    """
    lookahead: int = 6
    unit_bonus: float = 1.0
    lipid_integer_bonus: float = 0.1
    capture_order: List[AnalyteKey] = field(default_factory=lambda: [
        AnalyteKey.CRE, AnalyteKey.EGFR, AnalyteKey.UA, AnalyteKey.GLU,
        AnalyteKey.HBA1C, AnalyteKey.AST, AnalyteKey.ALT, AnalyteKey.ALP,
        AnalyteKey.GGT, AnalyteKey.LDH, AnalyteKey.TP, AnalyteKey.ALB,
        AnalyteKey.TC, AnalyteKey.LDL, AnalyteKey.HDL, AnalyteKey.TG,
    ])


class ReadingOrderProbe:
    """읽기 순서 텍스트 라인 기반 분석 항목 프로브"""

    def __init__(
        self,
        lexicon: AnalyteLexicon,
        settings: Optional[Settings] = None,
        lipid: Optional[LipidBundleExtractor] = None,
    ):
        self.lexicon = lexicon
        self.settings = settings or Settings()
        self.lipid = lipid or LipidBundleExtractor()

    def probe_document(self, document: DocumentData, lookahead: Optional[int] = None) -> List[ProbeResult]:
        return self.probe(document.text_lines, lookahead=lookahead)

    def probe(self, lines: List[str], lookahead: Optional[int] = None) -> List[ProbeResult]:
        """라인 목록에서 항목별 최선 후보를 찾습니다.

        Args:
            lines: 읽기 순서 텍스트 라인
            lookahead: 라벨 이후 탐색 줄 수 (None이면 설정값)

        Returns:
            항목 키 순으로 정렬된 ProbeResult 목록
        """
        span = self.settings.lookahead if lookahead is None else lookahead
        logger.debug(f"랩 프로브 시작: lines={len(lines)}, lookahead={span}")

        best: Dict[AnalyteKey, ProbeCandidate] = dict(self.lipid.detect(lines))

        for key in self.settings.capture_order:
            if key in best:
                continue
            idx = self.lexicon.first_line_index(key, lines)
            if idx is None:
                continue
            found = self.best_after_label(key, idx, lines, span)
            if found is None:
                continue
            value, value_line = found
            best[key] = ProbeCandidate(
                value=value,
                unit=detect_unit(lines[value_line]),
                label=lines[idx],
                label_line=idx,
                value_line=value_line,
            )
            logger.debug(f"[{key.value}] {value:.3f} ⟵ label: '{lines[idx]}' (lines {idx}→{value_line})")

        results = sorted(
            (
                ProbeResult(
                    key=key.value,
                    label=c.label,
                    value=c.value,
                    unit=c.unit,
                    value_line=c.value_line,
                    label_line=c.label_line,
                )
                for key, c in best.items()
            ),
            key=lambda r: r.key,
        )
        if results:
            summary = ", ".join(
                f"{r.key}={r.value:g}{(' ' + describe_unit(r.unit)) if describe_unit(r.unit) else ''}"
                for r in results
            )
            logger.info(f"랩 프로브 결과: {summary}")
        else:
            logger.info("랩 프로브 결과 없음")
        return results

    def best_after_label(
        self,
        key: AnalyteKey,
        label_idx: int,
        lines: List[str],
        max_lookahead: int,
    ) -> Optional[Tuple[float, int]]:
        """라벨 라인부터 max_lookahead 줄 안에서 점수가 가장 높은 (값, 라인 인덱스)"""
        s = self.settings
        best: Optional[Tuple[float, float, int]] = None  # (score, value, line)
        for offset in range(max_lookahead + 1):
            i = label_idx + offset
            if i >= len(lines):
                break
            line = lines[i]
            if is_range_or_header_line(line):
                continue
            vals = numbers(line)
            if not vals:
                continue
            has_unit = detect_unit(line) != LabUnit.UNKNOWN
            for v in vals:
                if not is_plausible(key, v):
                    continue
                score = 1.0 / (1 + offset)
                if has_unit:
                    score += s.unit_bonus
                if key in _LIPIDS and is_integer_value(v):
                    score += s.lipid_integer_bonus
                if best is None or score > best[0]:
                    best = (score, v, i)
        if best is None:
            return None
        return best[1], best[2]


# 프로브 키 → 패치 필드 (ALP/LDH/eGFR 는 패치 필드가 없어 제외)
_PROBE_FIELDS: Dict[str, str] = {
    AnalyteKey.WBC.value: "wbc_thousand_per_ul",
    AnalyteKey.RBC.value: "rbc_million_per_ul",
    AnalyteKey.HGB.value: "hgb_g_per_dl",
    AnalyteKey.HCT.value: "hct_percent",
    AnalyteKey.PLT.value: "plt_thousand_per_ul",
    AnalyteKey.AST.value: "ast",
    AnalyteKey.ALT.value: "alt",
    AnalyteKey.GGT.value: "ggt",
    AnalyteKey.TP.value: "total_protein",
    AnalyteKey.ALB.value: "albumin",
    AnalyteKey.CRE.value: "creatinine",
    AnalyteKey.UA.value: "uric_acid",
    AnalyteKey.GLU.value: "fasting_glucose_mgdl",
    AnalyteKey.HBA1C.value: "hba1c_ngsp_percent",
    AnalyteKey.TC.value: "total_chol",
    AnalyteKey.LDL.value: "ldl",
    AnalyteKey.HDL.value: "hdl",
    AnalyteKey.TG.value: "triglycerides",
}


def probe_results_to_patch(results: List[ProbeResult]) -> CheckupPatch:
    """프로브 결과를 패치로 변환 (패치 필드가 없는 항목은 버림)"""
    values: Dict[str, float] = {}
    for r in results:
        name = _PROBE_FIELDS.get(r.key)
        if name is not None:
            values[name] = r.value
    return CheckupPatch(**values)


__all__ = [
    "ProbeResult",
    "Settings",
    "ReadingOrderProbe",
    "probe_results_to_patch",
]
