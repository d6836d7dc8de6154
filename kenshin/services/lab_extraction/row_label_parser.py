"""행 라벨 기반 표 파서

"라벨 … 값 [단위]" 형태의 행을 처리합니다.
앞 세 셀로 행 라벨을 만들고(OCR 오인식 보정 포함), 일본어/영어 키워드 규칙에 대응시킨 뒤
지정 열부터 오른쪽으로 첫 숫자를 찾습니다. 단위는 같은 셀 또는 다음 셀에서 찾습니다.

혈압 행은 별도 처리: 행 안의 [30, 250] 범위 숫자를 열 순서로 모아 마지막 두 개를 취하고,
큰 값을 수축기, 작은 값을 이완기로 봅니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from kenshin.models.envelopes import CheckupPatch, MergePolicy, Table, TableCell

from .text_normalizer import compact, numbers
from .unit_model import (
    LabUnit,
    cholesterol_to_mgdl,
    creatinine_to_mgdl,
    detect_unit,
    glucose_to_mgdl,
    rbc_to_million_per_ul,
    to_thousand_per_ul,
    triglycerides_to_mgdl,
    uric_acid_to_mgdl,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NumericHit:
    """행에서 찾은 첫 숫자와 단위"""
    value: float
    unit: LabUnit
    unit_text: str


# (값, 단위, 단위 텍스트) -> 표준 단위 값
Converter = Callable[[float, LabUnit, str], float]


@dataclass(frozen=True)
class RowRule:
    """라벨 키워드 → 패치 필드 규칙"""
    keys: Tuple[str, ...]
    field_name: str
    convert: Optional[Converter] = None


_DEFAULT_RULES: List[RowRule] = [
    # 혈당 지표 - "ヘモグロビンa1c" 가 헤모글로빈 규칙에 걸리지 않도록 먼저 검사
    RowRule(("hba1c", "a1c", "ヘモグロビンa1c"), "hba1c_ngsp_percent"),
    # 혈구
    RowRule(("hemoglobin", "hgb", "ヘモグロビン"), "hgb_g_per_dl"),
    RowRule(("rbc", "赤血球"), "rbc_million_per_ul", lambda v, u, t: rbc_to_million_per_ul(v, u)),
    RowRule(("hematocrit", "hct", "pcv", "ヘマトクリット"), "hct_percent"),
    RowRule(("wbc", "白血球"), "wbc_thousand_per_ul", lambda v, u, t: to_thousand_per_ul(v, u)),
    RowRule(("platelet", "platelets", "血小板", "plt"), "plt_thousand_per_ul", lambda v, u, t: to_thousand_per_ul(v, u)),
    # 간
    RowRule(("ast", "got", "a s t"), "ast"),
    RowRule(("alt", "gpt", "a l t"), "alt"),
    RowRule(("ggt", "γ-gt", "γgt", "γ-gtp", "γgtp"), "ggt"),
    RowRule(("total protein", "tp", "総蛋白", "総たんぱく"), "total_protein"),
    RowRule(("albumin", "alb", "アルブミン"), "albumin"),
    # 신장 / 요산 (µmol/L 여부는 주변 텍스트로 판단)
    RowRule(("creatinine", "cr", "クレアチニン"), "creatinine", lambda v, u, t: creatinine_to_mgdl(v, t)),
    RowRule(("uric acid", "ua", "尿酸"), "uric_acid", lambda v, u, t: uric_acid_to_mgdl(v, t)),
    # 대사
    RowRule(("fasting glucose", "glucose", "空腹時血糖", "血糖"), "fasting_glucose_mgdl", lambda v, u, t: glucose_to_mgdl(v, u)),
    # 지질
    RowRule(("total cholesterol", "tc", "総コレステロール"), "total_chol", lambda v, u, t: cholesterol_to_mgdl(v, u)),
    RowRule(("hdl", "hdl-c", "hdlコレステロール"), "hdl", lambda v, u, t: cholesterol_to_mgdl(v, u)),
    RowRule(("ldl", "ldl-c", "ldlコレステロール"), "ldl", lambda v, u, t: cholesterol_to_mgdl(v, u)),
    RowRule(("triglycerides", "tg", "中性脂肪", "トリグリセリド"), "triglycerides", lambda v, u, t: triglycerides_to_mgdl(v, u)),
]


@dataclass
class Settings:
    """행 라벨 파서 설정값.

    - value_start_col: 값 탐색 시작 열 (행이 이보다 짧으면 1열부터)
    - label_cells: 행 라벨에 쓰는 앞 셀 수
    - label_fixes: 행 라벨 OCR 오인식 보정 (원문, 치환)
    - bp_range: 혈압으로 인정하는 닫힌 구간
    """
    value_start_col: int = 3
    label_cells: int = 3
    label_fixes: List[Tuple[str, str]] = field(default_factory=lambda: [
        ("BM", "BMI"),
        ("血王", "血圧"),
        ("力左", "視力左"),
        ("視右", "視力右"),
    ])
    height_keys: List[str] = field(default_factory=lambda: ["身長", "height"])
    weight_keys: List[str] = field(default_factory=lambda: ["体重", "weight"])
    waist_keys: List[str] = field(default_factory=lambda: ["腹", "waist", "abdominal", "waist circumference"])
    # "空腹時血糖" 처럼 "腹" 을 포함하는 혈당 라벨은 복위가 아님
    waist_exclude_keys: List[str] = field(default_factory=lambda: ["血糖"])
    bmi_keys: List[str] = field(default_factory=lambda: ["bmi"])
    body_fat_keys: List[str] = field(default_factory=lambda: ["body fat", "fat%", "体脂肪"])
    bp_keys: List[str] = field(default_factory=lambda: ["血圧", "血1回目", "血2回目", "blood pressure", "bp"])
    bp_range: Tuple[float, float] = (30.0, 250.0)
    rules: List[RowRule] = field(default_factory=lambda: list(_DEFAULT_RULES))


def label_has_any(label: str, keys: List[str]) -> bool:
    """라벨이 키 중 하나를 포함하면 True (대소문자 무시, 키의 공백은 무시)"""
    low = label.lower()
    for k in keys:
        needle = compact(k)
        if needle and (needle in low or needle in label):
            return True
    return False


class RowLabelParser:
    """행 라벨 키워드 규칙 기반 표 파서"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def row_label(self, row: List[TableCell]) -> str:
        """앞 셀들을 이어 붙이고 공백 제거 + OCR 오인식 보정"""
        joined = "".join(c.text for c in row[: self.settings.label_cells])
        joined = joined.replace(" ", "").replace("　", "").replace("\n", "").strip()
        for src, dst in self.settings.label_fixes:
            joined = joined.replace(src, dst)
        return joined

    def first_numeric_and_unit(self, row: List[TableCell], start_col: Optional[int] = None) -> Optional[NumericHit]:
        """start_col 부터 오른쪽으로 첫 숫자를 찾고 같은 셀 + 다음 셀에서 단위를 찾음

        주의: 기본 시작 열(3)은 "라벨 | 빈칸 | 빈칸 | 값 | 단위" 형태의 결과지 기준입니다.
        ["腹囲", "82.0", "cm", "84.9以下"] 처럼 값이 1열에 있는 4열 표에서는
        3열의 기준값(84.9)을 읽습니다. 파이프라인에서는 범용 표 추출기 결과가
        먼저 병합(PREFER_EXISTING)되므로 이 값은 빈 필드만 채웁니다.

        Args:
            row: 표의 한 행
            start_col: 탐색 시작 열 (None이면 설정값, 행이 그보다 짧으면 1열)

        Returns:
            NumericHit 또는 None
        """
        start = self.settings.value_start_col if start_col is None else start_col
        if len(row) <= start:
            start = 1
        tail = row[start:]
        for i, cell in enumerate(tail):
            vals = numbers(cell.text)
            if not vals:
                continue
            parts = [cell.text]
            if i + 1 < len(tail):
                parts.append(tail[i + 1].text)
            unit_text = " ".join(parts)
            return NumericHit(value=vals[0], unit=detect_unit(unit_text), unit_text=unit_text)
        return None

    def plausible_bp_values(self, row: List[TableCell]) -> Optional[Tuple[float, float]]:
        """행의 혈압 후보 중 마지막 두 개 → (수축기, 이완기)"""
        low, high = self.settings.bp_range
        with_index = [
            (c_idx, v)
            for c_idx, cell in enumerate(row)
            for v in numbers(cell.text)
        ]
        candidates = sorted(
            [(idx, v) for idx, v in with_index if low <= v <= high],
            key=lambda p: p[0],
        )
        if len(candidates) < 2:
            return None
        pair = [v for _, v in candidates[-2:]]
        return max(pair), min(pair)

    def parse_table(self, table: Table) -> CheckupPatch:
        """표 하나에서 부분 패치 추출"""
        s = self.settings
        out: Dict[str, float] = {}

        for row in table.rows:
            label = self.row_label(row)
            if not label:
                continue

            # --- 신체 계측 ---
            if label_has_any(label, s.height_keys):
                hit = self.first_numeric_and_unit(row)
                if hit and hit.unit in (LabUnit.CM, LabUnit.UNKNOWN):
                    out["height_cm"] = hit.value
                continue
            if label_has_any(label, s.weight_keys):
                hit = self.first_numeric_and_unit(row)
                if hit and hit.unit in (LabUnit.KG, LabUnit.UNKNOWN):
                    out["weight_kg"] = hit.value
                continue
            if label_has_any(label, s.waist_keys) and not label_has_any(label, s.waist_exclude_keys):
                hit = self.first_numeric_and_unit(row)
                if hit and hit.unit in (LabUnit.CM, LabUnit.UNKNOWN):
                    out["waist_cm"] = hit.value
                continue
            if label_has_any(label, s.bmi_keys):
                hit = self.first_numeric_and_unit(row)
                if hit:
                    out["bmi"] = hit.value
                continue
            if label_has_any(label, s.body_fat_keys):
                hit = self.first_numeric_and_unit(row)
                if hit:
                    out["fat_percent"] = hit.value
                continue

            # --- 혈압 ---
            if label_has_any(label, s.bp_keys):
                bp = self.plausible_bp_values(row)
                if bp is not None:
                    out.setdefault("systolic", bp[0])
                    out.setdefault("diastolic", bp[1])
                continue

            # --- 검사 항목: 값을 찾은 경우에만 다음 행으로 ---
            for rule in s.rules:
                if not label_has_any(label, list(rule.keys)):
                    continue
                hit = self.first_numeric_and_unit(row)
                if hit is None:
                    continue
                value = rule.convert(hit.value, hit.unit, hit.unit_text) if rule.convert else hit.value
                out[rule.field_name] = value
                break

        return CheckupPatch(**out)

    def extract(self, tables: List[Table]) -> CheckupPatch:
        """표별 결과를 앞에서부터 빈 필드만 채우며 병합"""
        merged = CheckupPatch()
        for t_idx, table in enumerate(tables):
            part = self.parse_table(table)
            logger.debug(f"행 라벨 파서: table={t_idx}, fields={list(part.filled_fields())}")
            merged = merged.merge(part, MergePolicy.PREFER_EXISTING)
        return merged


__all__ = ["NumericHit", "RowRule", "Settings", "RowLabelParser", "label_has_any"]
