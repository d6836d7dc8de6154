"""문서 인식기 테스트 (HTML 표 변환, PP-StructureV3 결과 변환, 팩토리, 더미)"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from PIL import UnidentifiedImageError

from kenshin.models.envelopes import DocumentData
from kenshin.services.recognition.dummy_recognizer import DummyRecognizer
from kenshin.services.recognition.factory import get_recognizer
from kenshin.services.recognition.html_table import parse_html_table
from kenshin.services.recognition.paddle_structure import PaddleStructureRecognizer


SAMPLE_HTML = (
    "<html><body><table>"
    "<tr><td>検査項目</td><td>今回</td><td>単位</td></tr>"
    "<tr><td>AST(GOT)</td><td>28</td><td>U/L</td></tr>"
    "<tr><td>ALT(GPT)</td><td>31</td><td>U/L</td></tr>"
    "</table></body></html>"
)


# =============================================================================
# HTML 표 변환
# =============================================================================

class TestParseHtmlTable:
    """parse_html_table() 테스트"""

    def test_simple(self):
        rows = parse_html_table(SAMPLE_HTML)
        assert rows == [
            ["検査項目", "今回", "単位"],
            ["AST(GOT)", "28", "U/L"],
            ["ALT(GPT)", "31", "U/L"],
        ]

    def test_colspan(self):
        html = (
            "<table><tr><th colspan='2'>項目</th><th>今回</th></tr>"
            "<tr><td>脂質</td><td>HDL</td><td>55</td></tr></table>"
        )
        assert parse_html_table(html) == [["項目", "", "今回"], ["脂質", "HDL", "55"]]

    def test_rowspan(self):
        html = (
            "<table><tr><td rowspan='2'>脂質</td><td>HDL</td><td>55</td></tr>"
            "<tr><td>LDL</td><td>130</td></tr></table>"
        )
        assert parse_html_table(html) == [["脂質", "HDL", "55"], ["脂質", "LDL", "130"]]

    def test_rowspan_last_column(self):
        html = (
            "<table><tr><td>AST</td><td rowspan='2'>U/L</td></tr>"
            "<tr><td>ALT</td></tr></table>"
        )
        assert parse_html_table(html) == [["AST", "U/L"], ["ALT", "U/L"]]

    def test_empty(self):
        assert parse_html_table("") == []
        assert parse_html_table("<p>no table</p>") == []


# =============================================================================
# PP-StructureV3 결과 변환
# =============================================================================

def _paddle_page():
    return {
        "table_res_list": [{"pred_html": SAMPLE_HTML}],
        "overall_ocr_res": {"rec_texts": ["健康診断結果", "AST(GOT)", "28", " "]},
        "parsing_res_list": [
            {"block_label": "doc_title", "block_content": "健康診断結果"},
            {"block_label": "text", "block_content": "受診日 2024年5月1日"},
            {"block_label": "table", "block_content": SAMPLE_HTML},
        ],
    }


class TestPaddleStructureRecognizer:
    """PaddleStructureRecognizer 결과 변환 테스트 (엔진 로드 없음)"""

    def test_convert(self):
        recognizer = PaddleStructureRecognizer()
        envelope = recognizer._convert([_paddle_page()])
        assert envelope is not None
        doc = envelope.data
        assert len(doc.tables) == 1
        assert doc.tables[0].cell_text(1, 1) == "28"
        assert doc.text_lines == ["健康診断結果", "AST(GOT)", "28"]
        assert doc.title == "健康診断結果"
        assert doc.paragraphs == ["受診日 2024年5月1日"]
        assert envelope.meta.engine == "PPStructureV3"
        assert envelope.meta.tables == 1

    def test_convert_empty(self):
        recognizer = PaddleStructureRecognizer()
        assert recognizer._convert([]) is None
        assert recognizer._convert([{"table_res_list": [], "overall_ocr_res": {"rec_texts": []}}]) is None

    def test_recognize_image_with_mock_engine(self, sample_image):
        recognizer = PaddleStructureRecognizer()
        engine = MagicMock()
        engine.predict.return_value = [_paddle_page()]
        recognizer._engine = engine

        envelope = recognizer.recognize_image(sample_image)

        assert envelope.data.tables[0].row_count == 3
        arr = engine.predict.call_args[0][0]
        assert arr.shape == (300, 400, 3)

    def test_engine_error_propagates(self, sample_image):
        recognizer = PaddleStructureRecognizer()
        recognizer._engine = MagicMock()
        recognizer._engine.predict.side_effect = RuntimeError("inference failed")
        with pytest.raises(RuntimeError):
            recognizer.recognize_image(sample_image)


# =============================================================================
# 팩토리
# =============================================================================

class TestRecognizerFactory:
    """get_recognizer() 테스트"""

    def test_get_paddle_recognizer(self):
        with patch('kenshin.services.recognition.factory.settings') as mock_settings:
            mock_settings.recognizer_provider = 'paddle'
            mock_settings.recognizer_lang = 'japan'
            mock_settings.recognizer_use_gpu = False
            recognizer = get_recognizer()
            assert isinstance(recognizer, PaddleStructureRecognizer)
            assert recognizer.lang == 'japan'

    def test_get_dummy_recognizer(self):
        with patch('kenshin.services.recognition.factory.settings') as mock_settings:
            mock_settings.recognizer_provider = 'dummy'
            assert isinstance(get_recognizer(), DummyRecognizer)

    def test_invalid_provider(self):
        with patch('kenshin.services.recognition.factory.settings') as mock_settings:
            mock_settings.recognizer_provider = 'invalid'
            with pytest.raises(ValueError, match="지원하지 않는 인식기 제공자"):
                get_recognizer()


# =============================================================================
# 더미 인식기
# =============================================================================

class TestDummyRecognizer:
    """DummyRecognizer 테스트"""

    def test_sample_document(self, dummy_recognizer, sample_image_bytes):
        envelope = asyncio.run(dummy_recognizer.recognize(sample_image_bytes))
        assert envelope.stage == "recognize"
        assert envelope.meta.engine == "DummyRecognizer"
        assert envelope.data.tables[0].cell_text(0, 1) == "今回"
        assert dummy_recognizer.calls == [(400, 300)]

    def test_responses_in_order(self, sample_image):
        recognizer = DummyRecognizer(responses=[None, DocumentData(text_lines=["a"])], fallback=None)
        assert recognizer.recognize_image(sample_image) is None
        assert recognizer.recognize_image(sample_image).data.text_lines == ["a"]
        assert recognizer.recognize_image(sample_image) is None

    def test_undecodable_bytes_raise(self, dummy_recognizer):
        with pytest.raises(UnidentifiedImageError):
            dummy_recognizer.recognize_bytes(b"garbage")
