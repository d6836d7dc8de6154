"""범용 "패널" 표 추출기 (값 열 자동 선택)

헤더 토큰과 숫자 밀도로 "今回/結果" 같은 값 열을 고른 뒤,
행 라벨을 고정 키워드 규칙에 대응시켜 값을 채웁니다.

처리 순서
1) 헤더 행 선택: 앞 3행 중 라벨/단위/범위/값 헤더 토큰 적중 점수(2/2/2/3)가 가장 높은 행
2) 값 열 선택: 헤더 가산/감산 + 숫자 밀도 x3.0 - 헤더 페널티 x2.0 이 가장 높은 열
3) 단위 열: 헤더 셀에 "単位" 가 있는 열 (선택)
4) 행 순회: 앞 두 셀로 라벨을 만들고 규칙 순서대로 첫 일치 항목에 값 저장
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from kenshin.models.envelopes import CheckupPatch, Table, TableCell

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

# (값, 단위, 단위 판단에 쓴 셀 텍스트) -> 표준 단위 값
Converter = Callable[[float, LabUnit, str], float]


def _identity(v: float, unit: LabUnit, text: str) -> float:
    return v


def _thousand(v: float, unit: LabUnit, text: str) -> float:
    return to_thousand_per_ul(v, unit)


def _rbc(v: float, unit: LabUnit, text: str) -> float:
    return rbc_to_million_per_ul(v, unit)


def _glucose(v: float, unit: LabUnit, text: str) -> float:
    return glucose_to_mgdl(v, unit)


def _cholesterol(v: float, unit: LabUnit, text: str) -> float:
    return cholesterol_to_mgdl(v, unit)


def _triglycerides(v: float, unit: LabUnit, text: str) -> float:
    return triglycerides_to_mgdl(v, unit)


def _creatinine(v: float, unit: LabUnit, text: str) -> float:
    return creatinine_to_mgdl(v, text)


def _uric_acid(v: float, unit: LabUnit, text: str) -> float:
    return uric_acid_to_mgdl(v, text)


@dataclass(frozen=True)
class Rule:
    """라벨 토큰 → 패치 필드 규칙 (exclude 토큰이 있으면 불일치)"""
    tokens: Tuple[str, ...]
    field_name: str
    convert: Converter = _identity
    exclude: Tuple[str, ...] = ()

    def matches(self, label: str) -> bool:
        if any(tok in label for tok in self.exclude):
            return False
        return any(tok in label for tok in self.tokens)


# 위에서부터 첫 일치 규칙 적용
_DEFAULT_RULES: List[Rule] = [
    # 신체 계측
    Rule(("身長",), "height_cm"),
    Rule(("体重",), "weight_kg"),
    # "空腹時血糖" 도 "腹" 을 포함하므로 제외
    Rule(("腹囲", "腹"), "waist_cm", exclude=("血糖",)),
    Rule(("bmi",), "bmi"),
    # 혈구
    Rule(("白血球", "wbc"), "wbc_thousand_per_ul", _thousand),
    Rule(("赤血球", "rbc"), "rbc_million_per_ul", _rbc),
    # HbA1c 라벨("ヘモグロビンa1c")이 헤모글로빈 규칙에 먼저 걸리지 않도록 앞에 둠
    Rule(("hba1c", "ヘモグロビンa1c"), "hba1c_ngsp_percent"),
    Rule(("ヘモグロビン", "hgb", "hemoglobin"), "hgb_g_per_dl"),
    Rule(("ヘマトクリット", "hct", "hematocrit"), "hct_percent"),
    Rule(("血小板", "plt", "platelet"), "plt_thousand_per_ul", _thousand),
    # 간
    Rule(("ast", "got"), "ast"),
    Rule(("alt", "gpt"), "alt"),
    Rule(("γ", "y-gt", "ggt", "gtp"), "ggt"),
    # 단백
    Rule(("総蛋白", "総たんぱく", "totalprotein", "tp"), "total_protein"),
    Rule(("アルブミン", "albumin", "alb"), "albumin"),
    # 신장 / 요산
    Rule(("クレアチニン", "creatinine", "cre"), "creatinine", _creatinine),
    Rule(("尿酸", "uric", "ua"), "uric_acid", _uric_acid),
    # 대사
    Rule(("グルコース", "血糖", "glucose"), "fasting_glucose_mgdl", _glucose),
    # 지질
    Rule(("総コレステ", "totalcholesterol", "tc"), "total_chol", _cholesterol),
    Rule(("ldl",), "ldl", _cholesterol),
    Rule(("hdl",), "hdl", _cholesterol),
    Rule(("中性脂肪", "トリグリセリド", "triglycerides", "tg"), "triglycerides", _triglycerides),
]


@dataclass
class Settings:
    """범용 표 추출기 설정값.

    - *_header_tokens: 헤더 행/열 판별 토큰
    - header_*_weight: 헤더 행 선택 가중치
    - column_*: 값 열 점수 가중치
    - rules: Rule(라벨 토큰, 필드, 변환기, 제외 토큰) 목록 (순서 = 우선순위)
    """
    label_header_tokens: List[str] = field(default_factory=lambda: ["項目名", "検査項目", "項目", "名称", "parameter", "test", "analyte"])
    unit_header_tokens: List[str] = field(default_factory=lambda: ["単位", "unit"])
    range_header_tokens: List[str] = field(default_factory=lambda: ["基準", "参考", "範囲", "レンジ", "range", "ref"])
    value_header_tokens: List[str] = field(default_factory=lambda: ["今回", "現値", "結果", "測定値", "実測", "当日", "result", "value", "current"])

    header_scan_rows: int = 3
    header_label_weight: int = 2
    header_unit_weight: int = 2
    header_range_weight: int = 2
    header_value_weight: int = 3

    column_value_bonus: float = 2.5
    column_range_penalty: float = 2.0
    column_unit_penalty: float = 2.0
    column_label_penalty: float = 1.5
    column_density_weight: float = 3.0
    column_header_penalty_weight: float = 2.0

    unit_column_token: str = "単位"
    label_cells: int = 2
    rules: List[Rule] = field(default_factory=lambda: list(_DEFAULT_RULES))


class GenericTableExtractor:
    """헤더 점수 기반 값 열 선택 추출기"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    # ---------- 헤더 토큰 판별 ----------
    @staticmethod
    def _hit(text: str, tokens: List[str]) -> bool:
        s = compact(text)
        return any(compact(tok) in s for tok in tokens)

    def header_row_index(self, table: Table) -> Optional[int]:
        """앞 몇 행 중 헤더 토큰 점수가 가장 높은 행 (신호가 없으면 0, 빈 표는 None)"""
        s = self.settings
        if not table.rows:
            return None
        best_idx, best_score = 0, -1
        for i in range(min(table.row_count, s.header_scan_rows)):
            joined = "".join(c.text for c in table.rows[i])
            score = 0
            if self._hit(joined, s.label_header_tokens):
                score += s.header_label_weight
            if self._hit(joined, s.unit_header_tokens):
                score += s.header_unit_weight
            if self._hit(joined, s.range_header_tokens):
                score += s.header_range_weight
            if self._hit(joined, s.value_header_tokens):
                score += s.header_value_weight
            if score > best_score:
                best_idx, best_score = i, score
        return best_idx

    def column_score(self, table: Table, header_row: int, col: int) -> float:
        s = self.settings
        header_txt = table.cell_text(header_row, col)
        is_value = self._hit(header_txt, s.value_header_tokens)
        is_range = self._hit(header_txt, s.range_header_tokens)
        is_unit = self._hit(header_txt, s.unit_header_tokens)
        is_label = self._hit(header_txt, s.label_header_tokens)

        header_score = (
            (s.column_value_bonus if is_value else 0.0)
            - (s.column_range_penalty if is_range else 0.0)
            - (s.column_unit_penalty if is_unit else 0.0)
            - (s.column_label_penalty if is_label else 0.0)
        )

        numeric_rows, considered = 0, 0
        for r in range(header_row + 1, table.row_count):
            if col >= len(table.rows[r]):
                continue
            txt = table.rows[r][col].text
            if txt.strip():
                considered += 1
                if numbers(txt):
                    numeric_rows += 1
        density = numeric_rows / considered if considered > 0 else 0.0
        penalty = float(is_label) + float(is_unit) + float(is_range)
        return header_score + density * s.column_density_weight - penalty * s.column_header_penalty_weight

    def pick_value_column(self, table: Table, header_row: int) -> Optional[int]:
        """값 열 인덱스 (판단 불가 시 None)"""
        if header_row >= table.row_count or not table.rows[header_row]:
            return None
        best_col, best_score = -1, -1.0
        for c in range(table.max_cols):
            score = self.column_score(table, header_row, c)
            if score > best_score:
                best_col, best_score = c, score
        return best_col if best_col >= 0 else None

    def unit_column_index(self, table: Table, header_row: int) -> Optional[int]:
        if header_row >= table.row_count:
            return None
        for c, cell in enumerate(table.rows[header_row]):
            if self.settings.unit_column_token in compact(cell.text):
                return c
        return None

    def row_label(self, row: List[TableCell]) -> str:
        joined = "".join(c.text for c in row[: self.settings.label_cells])
        return compact(joined.replace(" ", "").replace("　", ""))

    def match_rule(self, label: str) -> Optional[Rule]:
        for rule in self.settings.rules:
            if rule.matches(label):
                return rule
        return None

    # ---------- 공개 API ----------
    def extract(self, tables: List[Table]) -> CheckupPatch:
        """표 목록에서 부분 패치 추출 (뒤 표의 값이 앞 표의 값을 덮어씀)"""
        values: Dict[str, float] = {}
        for t_idx, table in enumerate(tables):
            hr = self.header_row_index(table)
            if hr is None:
                continue
            value_col = self.pick_value_column(table, hr)
            if value_col is None:
                continue
            unit_col = self.unit_column_index(table, hr)
            logger.debug(f"범용 추출: table={t_idx}, header_row={hr}, value_col={value_col}, unit_col={unit_col}")

            for row in table.rows[hr + 1:]:
                label = self.row_label(row)
                value_txt = row[value_col].text if value_col < len(row) else ""
                vals = numbers(value_txt)
                if not vals:
                    continue
                v = vals[0]
                if unit_col is not None and unit_col < len(row):
                    unit_txt = row[unit_col].text
                else:
                    unit_txt = value_txt
                unit = detect_unit(unit_txt)

                rule = self.match_rule(label)
                if rule is None:
                    continue
                values[rule.field_name] = rule.convert(v, unit, unit_txt)
        return CheckupPatch(**values)


__all__ = ["Rule", "Settings", "GenericTableExtractor"]
