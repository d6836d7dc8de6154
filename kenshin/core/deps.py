"""
Dependency providers for the checkup parsing pipeline.

- get_recognizer_service(): Singleton document recognizer chosen by settings
- get_lexicon(): Cached analyte lexicon
- get_row_parser(): Row-label parser with env-driven value start column
- get_probe(): Reading-order probe wired with the shared lexicon
- get_sweep(): Recognition sweep configured from settings
- get_parser_settings(): Orchestrator settings mapped from env
- get_checkup_parser(): Factory for CheckupParser wired with DI
"""
from __future__ import annotations

from functools import lru_cache

from kenshin.settings import settings
from kenshin.services.recognition.base import BaseDocumentRecognizer
from kenshin.services.recognition.factory import get_recognizer
from kenshin.services.lab_extraction.checkup_parser import CheckupParser, Settings as ParserSettings
from kenshin.services.lab_extraction.reading_order_probe import ReadingOrderProbe, Settings as ProbeSettings
from kenshin.services.lab_extraction.reference.analyte_lexicon import AnalyteLexicon, get_analyte_lexicon
from kenshin.services.lab_extraction.row_label_parser import RowLabelParser, Settings as RowSettings
from kenshin.services.lab_extraction.sweep import RecognitionSweep, Settings as SweepSettings


# Recognizer provider (singleton: engine load is expensive)
@lru_cache(maxsize=1)
def get_recognizer_service() -> BaseDocumentRecognizer:
    return get_recognizer()

# Lexicon provider
@lru_cache(maxsize=1)
def get_lexicon() -> AnalyteLexicon:
    return get_analyte_lexicon()

# Row parser provider
def get_row_parser() -> RowLabelParser:
    return RowLabelParser(settings=RowSettings(value_start_col=settings.row_value_start_col))

# Probe provider
def get_probe() -> ReadingOrderProbe:
    return ReadingOrderProbe(get_lexicon(), settings=ProbeSettings(lookahead=settings.probe_lookahead))

# Sweep provider (shares the recognizer singleton)
def get_sweep() -> RecognitionSweep:
    s = SweepSettings(
        long_edges=list(settings.sweep_long_edges),
        jpeg_quality=settings.sweep_jpeg_quality,
    )
    return RecognitionSweep(get_recognizer_service(), settings=s)

# Orchestrator settings provider
def get_parser_settings() -> ParserSettings:
    return ParserSettings(
        probe_lookahead=settings.probe_lookahead,
        merge_probe_results=settings.merge_probe_results,
        debug=settings.app_debug,
    )

# Parser provider (factory)
def get_checkup_parser() -> CheckupParser:
    return CheckupParser.create_with_deps()


def clear_cached_providers() -> None:
    """캐시된 싱글톤 초기화 (설정 변경 후 / 테스트용)"""
    get_recognizer_service.cache_clear()
    get_lexicon.cache_clear()
