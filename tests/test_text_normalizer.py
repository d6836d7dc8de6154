"""텍스트/숫자 정규화 테스트"""

import pytest

from kenshin.services.lab_extraction.text_normalizer import (
    compact,
    first_number,
    is_integer_value,
    normalize,
    numbers,
    probe_key,
)


class TestCompact:
    """compact() 테스트"""

    def test_lowercase_and_strip_spaces(self):
        assert compact("Total Protein") == "totalprotein"
        assert compact("総　コレステロール") == "総コレステロール"

    def test_strip_newlines(self):
        assert compact("HDL\nコレステロール") == "hdlコレステロール"

    def test_fold_slash_and_micro(self):
        assert compact("10^3／μL") == "10^3/µl"
        assert compact("mg∕dL") == "mg/dl"

    @pytest.mark.parametrize("text", ["AST (GOT)", "白血球数 /μL", "", "  HbA1c  "])
    def test_idempotent(self, text):
        """compact(compact(s)) == compact(s)"""
        assert compact(compact(text)) == compact(text)


class TestNormalizeAndProbeKey:
    """normalize() / probe_key() 테스트"""

    def test_normalize_keeps_spaces(self):
        assert normalize("Uric Acid μmol／L") == "uric acid µmol/l"

    def test_probe_key(self):
        assert probe_key("AST　(GOT)") == "ast(got)"
        assert probe_key("LDL コレステロール") == "ldlコレステロール"
        assert probe_key("") == ""


class TestNumbers:
    """numbers() 테스트"""

    def test_left_to_right(self):
        assert numbers("LDL 132, HDL 58, TG 121") == [132.0, 58.0, 121.0]

    def test_comma_as_decimal(self):
        assert numbers("4,52") == [4.52]

    def test_signed(self):
        assert numbers("変化 -3.5") == [-3.5]

    def test_no_numbers(self):
        assert numbers("基準値なし") == []
        assert numbers("") == []

    def test_first_number(self):
        assert first_number("結果 5.6 %") == 5.6
        assert first_number("なし") is None


class TestIsIntegerValue:
    """is_integer_value() 테스트"""

    def test_integer_like(self):
        assert is_integer_value(130.0)
        assert is_integer_value(129.9995)

    def test_fractional(self):
        assert not is_integer_value(5.6)
