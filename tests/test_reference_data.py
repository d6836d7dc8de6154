"""분석 항목 사전 / 타당 범위 / 라인 필터 테스트"""

import pytest

from kenshin.services.lab_extraction.line_filters import is_range_or_header_line, is_range_string
from kenshin.services.lab_extraction.plausibility import PLAUSIBLE_RANGES, is_plausible
from kenshin.services.lab_extraction.reference.analyte_lexicon import (
    AnalyteKey,
    build_analyte_lexicon,
    get_analyte_lexicon,
)


class TestAnalyteLexicon:
    """AnalyteLexicon 테스트"""

    def test_cached(self):
        assert get_analyte_lexicon() is get_analyte_lexicon()

    def test_force_rebuild(self):
        first = get_analyte_lexicon()
        rebuilt = get_analyte_lexicon(force_rebuild=True)
        assert rebuilt is not first
        assert rebuilt.labels_for(AnalyteKey.AST) == first.labels_for(AnalyteKey.AST)

    def test_every_key_has_labels(self):
        lex = build_analyte_lexicon()
        for key in AnalyteKey:
            assert lex.labels_for(key), key

    def test_immutable(self):
        lex = build_analyte_lexicon()
        with pytest.raises(TypeError):
            lex.labels[AnalyteKey.AST] = ("x",)  # type: ignore[index]

    def test_normalized_labels(self):
        lex = build_analyte_lexicon()
        assert "totalprotein" in lex.normalized_labels_for(AnalyteKey.TP)
        assert "hba1c" in lex.normalized_labels_for(AnalyteKey.HBA1C)

    def test_match_key(self, lexicon):
        assert lexicon.match_key("白血球数") == AnalyteKey.WBC
        assert lexicon.match_key("ＨＤＬ") is None
        assert lexicon.match_key("HDL コレステロール") == AnalyteKey.HDL
        assert lexicon.match_key("") is None

    def test_first_line_index(self, lexicon):
        lines = ["受診者 山田", "AST (GOT)", "28"]
        assert lexicon.first_line_index(AnalyteKey.AST, lines) == 1
        assert lexicon.first_line_index(AnalyteKey.HDL, lines) is None


class TestPlausibility:
    """타당 범위 테스트"""

    def test_hba1c_bounds_inclusive(self):
        assert is_plausible(AnalyteKey.HBA1C, 3.5)
        assert is_plausible(AnalyteKey.HBA1C, 14.0)

    def test_hba1c_outside(self):
        assert not is_plausible(AnalyteKey.HBA1C, 3.49)
        assert not is_plausible(AnalyteKey.HBA1C, 14.01)

    def test_unknown_key(self):
        assert not is_plausible("XYZ", 1.0)  # type: ignore[arg-type]

    def test_ranges_are_readonly(self):
        with pytest.raises(TypeError):
            PLAUSIBLE_RANGES[AnalyteKey.GLU] = (0.0, 1.0)  # type: ignore[index]


class TestLineFilters:
    """기준범위/헤더 라인 판별 테스트"""

    @pytest.mark.parametrize("line", ["130-219", "81.1~101.6", "基準値", "単位 mg/dL", "検査項目 結果"])
    def test_range_or_header(self, line):
        assert is_range_or_header_line(line)

    def test_value_line(self):
        assert not is_range_or_header_line("210 130 55")
        assert not is_range_string("HDL 55")
