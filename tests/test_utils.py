"""유틸리티 테스트 (이미지, 로깅, 표 덤프, 설정, DI 프로바이더)"""

import logging
from unittest.mock import patch

import pytest
from PIL import Image

from kenshin.models.envelopes import DocumentData, Table
from kenshin.services.lab_extraction.table_inspector import (
    document_inventory,
    dump_table,
    dump_tables,
    dump_tables_as_csv,
    pick_best_table,
)
from kenshin.settings import Settings, validate_settings
from kenshin.utils.images import (
    crop_normalized,
    image_to_bytes,
    load_image_from_bytes,
    resize_long_edge,
)
from kenshin.utils.logging_setup import load_logging_config, setup_logging


# =============================================================================
# 이미지 유틸
# =============================================================================

class TestImageUtils:
    """이미지 유틸리티 테스트"""

    def test_roundtrip_png(self, sample_image):
        loaded = load_image_from_bytes(image_to_bytes(sample_image))
        assert loaded.size == (400, 300)

    def test_jpeg_from_rgba(self):
        img = Image.new("RGBA", (10, 10), color=(255, 0, 0, 128))
        data = image_to_bytes(img, format="JPEG", quality=80)
        assert load_image_from_bytes(data).mode == "RGB"

    def test_resize_long_edge(self, sample_image):
        assert resize_long_edge(sample_image, 200).size == (200, 150)
        assert resize_long_edge(sample_image, 1000) is sample_image

    def test_crop_normalized(self, sample_image):
        assert crop_normalized(sample_image, (0.5, 0.5, 0.5, 0.5)).size == (200, 150)
        assert crop_normalized(sample_image, (0.25, 0.25, 0.5, 0.5)).size == (200, 150)

    def test_crop_empty_raises(self, sample_image):
        with pytest.raises(ValueError):
            crop_normalized(sample_image, (0.5, 0.5, 0.0, 0.5))


# =============================================================================
# 로깅
# =============================================================================

class TestLoggingSetup:
    """setup_logging() 테스트"""

    def test_missing_config(self, tmp_path):
        assert load_logging_config(tmp_path / "none.yml") == {}

    def test_load_yaml(self, tmp_path):
        cfg = tmp_path / "logging.yml"
        cfg.write_text(
            "version: 1\n"
            "disable_existing_loggers: false\n"
            "loggers:\n"
            "  kenshin:\n"
            "    level: DEBUG\n",
            encoding="utf-8",
        )
        data = load_logging_config(cfg)
        assert data["version"] == 1
        assert data["loggers"]["kenshin"]["level"] == "DEBUG"

    def test_setup_sets_level(self, tmp_path):
        setup_logging(config_path=str(tmp_path / "none.yml"), level="debug")
        assert logging.getLogger("kenshin").level == logging.DEBUG
        setup_logging(config_path=str(tmp_path / "none.yml"), level="INFO")
        assert logging.getLogger("kenshin").level == logging.INFO


# =============================================================================
# 표 덤프
# =============================================================================

class TestTableInspector:
    """table_inspector 테스트"""

    def test_dump_table(self):
        out = dump_table(Table.from_texts([["AST", "28"]]))
        assert "Rows: 1, Max Cols: 2" in out
        assert '[0,1] "28"' in out

    def test_dump_tables_truncates(self):
        t = Table.from_texts([["x" * 60] + [str(i) for i in range(10)]])
        out = dump_tables([t], max_cells=2, max_chars=10)
        assert "tables: 1" in out
        assert "x" * 9 + "…" in out
        assert out.rstrip().endswith("| …")

    def test_csv(self):
        out = dump_tables_as_csv([Table.from_texts([["AST", "28"], ["a,b", "1"]])])
        assert out.splitlines() == ["AST,28", '"a,b",1']

    def test_inventory(self, checkup_document):
        out = document_inventory(checkup_document)
        assert "title: 健康診断結果報告書" in out
        assert "tables: 1" in out
        assert "lines: 13" in out

    def test_pick_best_table(self):
        small = Table.from_texts([["a"]])
        big = Table.from_texts([["a", "b"], ["c", "d"]])
        assert pick_best_table([small, big]) is big
        assert pick_best_table([]) is None

    def test_inventory_empty(self):
        assert "tables: 0" in document_inventory(DocumentData())


# =============================================================================
# 설정
# =============================================================================

class TestSettings:
    """Settings / validate_settings() 테스트"""

    def test_defaults(self):
        s = Settings()
        assert s.recognizer_lang == "japan"
        assert s.sweep_long_edges == [2400, 1800, 1400]
        assert s.row_value_start_col == 3
        assert s.merge_probe_results is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RECOGNIZER_PROVIDER", "dummy")
        monkeypatch.setenv("PROBE_LOOKAHEAD", "4")
        s = Settings()
        assert s.recognizer_provider == "dummy"
        assert s.probe_lookahead == 4

    def test_validate_unsorted_edges(self):
        bad = Settings(recognizer_provider="dummy", sweep_long_edges=[1400, 2400])
        with patch("kenshin.settings.settings", bad):
            warnings = validate_settings()
        assert "sweep" in warnings

    def test_validate_quality(self):
        bad = Settings(recognizer_provider="dummy", sweep_jpeg_quality=0)
        with patch("kenshin.settings.settings", bad):
            assert "sweep_quality" in validate_settings()

    def test_validate_ok(self):
        good = Settings(recognizer_provider="dummy")
        with patch("kenshin.settings.settings", good):
            assert validate_settings() == {}


# =============================================================================
# DI 프로바이더
# =============================================================================

class TestDeps:
    """kenshin.core.deps 테스트"""

    def test_checkup_parser_with_dummy(self):
        from kenshin.core import deps
        from kenshin.services.lab_extraction.checkup_parser import CheckupParser
        from kenshin.services.recognition.dummy_recognizer import DummyRecognizer

        deps.clear_cached_providers()
        try:
            with patch("kenshin.services.recognition.factory.settings") as mock_settings:
                mock_settings.recognizer_provider = "dummy"
                parser = deps.get_checkup_parser()
            assert isinstance(parser, CheckupParser)
            assert isinstance(parser.recognizer, DummyRecognizer)
            assert parser.sweep.recognizer is parser.recognizer
            assert parser.lexicon is deps.get_lexicon()
        finally:
            deps.clear_cached_providers()
