"""지질 행 묶음(lipid row-bundle) 추출기

일본 검진표에서 흔한 배치: 라벨 열(총콜레스테롤/LDL/HDL)이 먼저 여러 줄로 나오고,
몇 줄 뒤에 "210 130 55" 처럼 값만 한 줄에 모여 있는 형태를 처리합니다.

처리 순서
1) 8줄 창 안에서 총콜레스테롤/LDL/HDL 라벨 라인을 수집 (non-HDL 라인은 무시)
2) 가장 앞선 라벨 다음 줄부터 최대 40줄 안에서 숫자가 3개 이상이고
   기준범위/헤더 라인이 아닌 첫 줄을 찾음
3) 앞의 세 숫자를 문서 순서대로 TC, LDL, HDL 에 할당 (각각 타당 범위 검사)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from kenshin.models.envelopes import CheckupPatch, MergePolicy, Table

from .line_filters import is_range_or_header_line
from .plausibility import is_plausible
from .reference.analyte_lexicon import AnalyteKey
from .text_normalizer import numbers, probe_key
from .unit_model import LabUnit, cholesterol_to_mgdl, detect_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeCandidate:
    """라벨 근처에서 찾은 값 후보 (내부용)"""
    value: float
    unit: LabUnit
    label: str
    label_line: int
    value_line: int


@dataclass
class Settings:
    """지질 묶음 탐지 설정값.

    - needles: (라벨 토큰, 항목 키) 목록
    - ignore_tokens: 이 토큰을 포함한 라인은 라벨로 보지 않음
    - label_gap: 라벨이 충분히 모인 뒤 마지막 라벨과 이만큼 떨어지면 수집 중단
    - scan_window: 값 라인을 찾는 최대 범위 (첫 라벨 기준)
    """
    needles: List[Tuple[str, AnalyteKey]] = field(default_factory=lambda: [
        ("総コレステロール", AnalyteKey.TC),
        ("ldlコレステロール", AnalyteKey.LDL),
        ("hdlコレステロール", AnalyteKey.HDL),
    ])
    ignore_tokens: List[str] = field(default_factory=lambda: ["non-hdl"])
    min_labels: int = 3
    label_gap: int = 8
    scan_window: int = 40
    min_numbers: int = 3
    assign_order: List[AnalyteKey] = field(default_factory=lambda: [
        AnalyteKey.TC, AnalyteKey.LDL, AnalyteKey.HDL,
    ])


class LipidBundleExtractor:
    """라벨 묶음 + 값 한 줄 패턴으로 TC/LDL/HDL 을 찾는 추출기"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def _collect_labels(self, lines: List[str]) -> List[Tuple[int, AnalyteKey]]:
        s = self.settings
        needles = [(probe_key(n), key) for n, key in s.needles]
        ignore = [probe_key(t) for t in s.ignore_tokens]
        found: List[Tuple[int, AnalyteKey]] = []
        for i, raw in enumerate(lines):
            t = probe_key(raw)
            if not any(tok in t for tok in ignore):
                for needle, key in needles:
                    if needle in t:
                        found.append((i, key))
            if len(found) >= s.min_labels and i - found[-1][0] > s.label_gap:
                break
        return found

    def detect(self, lines: List[str]) -> Dict[AnalyteKey, ProbeCandidate]:
        """라인 목록에서 지질 묶음을 찾아 항목별 후보를 반환 (없으면 빈 dict)"""
        s = self.settings
        labels = self._collect_labels(lines)
        if not labels:
            return {}

        start = min(idx for idx, _ in labels)
        row_idx: Optional[int] = None
        for j in range(start + 1, min(len(lines), start + s.scan_window)):
            if len(numbers(lines[j])) >= s.min_numbers and not is_range_or_header_line(lines[j]):
                row_idx = j
                break
        if row_idx is None:
            return {}

        vals = numbers(lines[row_idx])
        unit = detect_unit(lines[row_idx])
        out: Dict[AnalyteKey, ProbeCandidate] = {}
        for k, key in enumerate(s.assign_order):
            if k >= len(vals):
                break
            v = vals[k]
            if not is_plausible(key, v):
                continue
            label_line = next((idx for idx, a in labels if a == key), start)
            out[key] = ProbeCandidate(
                value=v,
                unit=unit,
                label=lines[label_line],
                label_line=label_line,
                value_line=row_idx,
            )
            logger.debug(f"[{key.value}] {v:.3f} ⟵ label: '{lines[label_line]}' (lines {label_line}→{row_idx})")
        return out

    @staticmethod
    def table_lines(table: Table) -> List[str]:
        """표의 각 행을 공백으로 이어 붙인 라인 목록"""
        return [" ".join(t for t in row if t) for row in table.row_texts()]

    def extract(self, tables: List[Table]) -> CheckupPatch:
        """표 행들을 라인으로 보고 지질 묶음을 적용한 부분 패치"""
        out = CheckupPatch()
        for table in tables:
            found = self.detect(self.table_lines(table))
            if not found:
                continue
            part = CheckupPatch(
                total_chol=_converted(found.get(AnalyteKey.TC)),
                ldl=_converted(found.get(AnalyteKey.LDL)),
                hdl=_converted(found.get(AnalyteKey.HDL)),
            )
            out = out.merge(part, MergePolicy.PREFER_EXISTING)
        return out


def _converted(cand: Optional[ProbeCandidate]) -> Optional[float]:
    if cand is None:
        return None
    return cholesterol_to_mgdl(cand.value, cand.unit)


__all__ = ["ProbeCandidate", "Settings", "LipidBundleExtractor"]
