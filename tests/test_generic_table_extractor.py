"""범용 표 추출기 테스트"""

import pytest

from kenshin.models.envelopes import Table
from kenshin.services.lab_extraction.generic_table_extractor import (
    GenericTableExtractor,
    Rule,
    Settings,
)


@pytest.fixture
def extractor():
    return GenericTableExtractor()


# =============================================================================
# 헤더 / 값 열 선택
# =============================================================================

class TestColumnSelection:
    """헤더 행과 값 열 선택 테스트"""

    def test_header_row(self, extractor, checkup_document):
        table = checkup_document.tables[0]
        assert extractor.header_row_index(table) == 0

    def test_header_row_after_title(self, extractor):
        table = Table.from_texts([
            ["血液検査"],
            ["検査項目", "今回", "単位", "基準値"],
            ["AST", "28", "U/L", "30以下"],
        ])
        assert extractor.header_row_index(table) == 1

    def test_value_column_is_current(self, extractor, checkup_document):
        """今回 열이 단위/기준값 열보다 우선"""
        table = checkup_document.tables[0]
        assert extractor.pick_value_column(table, 0) == 1

    def test_value_column_after_reference(self, extractor, panel_table):
        assert extractor.pick_value_column(panel_table, 0) == 3
        assert extractor.unit_column_index(panel_table, 0) == 2

    def test_empty_table(self, extractor):
        assert extractor.header_row_index(Table()) is None
        assert extractor.extract([Table()]).is_empty


# =============================================================================
# 값 추출
# =============================================================================

class TestExtract:
    """extract() 테스트"""

    def test_sample_document(self, extractor, checkup_document):
        patch = extractor.extract(checkup_document.tables)
        assert patch.height_cm == 170.2
        assert patch.weight_kg == 65.4
        assert patch.waist_cm == 82.0
        assert patch.ast == 28
        assert patch.alt == 31
        assert patch.ggt == 45
        assert patch.fasting_glucose_mgdl == 96
        assert patch.hba1c_ngsp_percent == 5.4
        assert patch.total_chol == 210
        assert patch.hdl == 55
        assert patch.ldl == 130
        assert patch.triglycerides == 121

    def test_fasting_glucose_is_not_waist(self, extractor):
        """空腹時血糖 의 "腹" 이 복위 규칙에 걸리지 않음"""
        table = Table.from_texts([
            ["検査項目", "結果", "単位"],
            ["空腹時血糖", "96", "mg/dL"],
        ])
        patch = extractor.extract([table])
        assert patch.fasting_glucose_mgdl == 96
        assert patch.waist_cm is None

    def test_unit_conversions(self, extractor, panel_table):
        patch = extractor.extract([panel_table])
        assert patch.wbc_thousand_per_ul == pytest.approx(6.2)
        assert patch.rbc_million_per_ul == pytest.approx(4.52)
        assert patch.hgb_g_per_dl == 14.2
        assert patch.fasting_glucose_mgdl == pytest.approx(99.0)

    def test_thousand_per_ul_unit(self, extractor):
        table = Table.from_texts([
            ["検査項目", "結果", "単位"],
            ["白血球数", "6.2", "千/µL"],
        ])
        patch = extractor.extract([table])
        assert patch.wbc_thousand_per_ul == pytest.approx(6.2)

    def test_hba1c_not_hemoglobin(self, extractor, panel_table):
        patch = extractor.extract([panel_table])
        assert patch.hba1c_ngsp_percent == 5.6
        assert patch.hgb_g_per_dl == 14.2

    def test_later_table_overwrites(self, extractor):
        first = Table.from_texts([["検査項目", "今回"], ["AST", "28"]])
        second = Table.from_texts([["検査項目", "今回"], ["AST", "35"]])
        assert extractor.extract([first, second]).ast == 35

    def test_rows_without_numbers_skipped(self, extractor):
        table = Table.from_texts([
            ["検査項目", "今回"],
            ["AST", "-"],
            ["ALT", "31"],
        ])
        patch = extractor.extract([table])
        assert patch.ast is None
        assert patch.alt == 31

    def test_custom_rules(self):
        settings = Settings(rules=[Rule(("尿酸",), "uric_acid")])
        patch = GenericTableExtractor(settings).extract([
            Table.from_texts([["検査項目", "今回"], ["尿酸", "5.8"], ["AST", "28"]])
        ])
        assert patch.uric_acid == 5.8
        assert patch.ast is None


class TestRule:
    """Rule 매칭 테스트"""

    def test_exclude(self):
        rule = Rule(("腹",), "waist_cm", exclude=("血糖",))
        assert rule.matches("腹囲")
        assert not rule.matches("空腹時血糖")
