"""검진 결과지 값 추출 패키지

인식된 문서(표/텍스트 라인)에서 검진 항목 값을 찾아 CheckupPatch 로 구조화합니다.

주요 모듈:
- text_normalizer / unit_model / plausibility: 텍스트 정규화, 단위 판별/환산, 타당 범위
- generic_table_extractor: 헤더 기반 값 열 선택 + 라벨 규칙 추출
- row_label_parser: 행 라벨 키워드 기반 추출 (신체계측/혈압 포함)
- lipid_bundle: 지질 라벨 묶음 + 값 한 줄 패턴 추출
- reading_order_probe: 표가 없을 때 읽기 순서 라인 프로브
- sweep: 크기/크롭 변형 재인식
- checkup_parser: 전체 흐름 오케스트레이션
- reference/: 분석 항목 동의어 사전
"""

from .checkup_parser import CheckupParser, Settings as CheckupParserSettings
from .errors import (
    CheckupParseError,
    EmptyResultsError,
    NoDocumentError,
    NoTableError,
    require_tables,
    require_values,
)
from .generic_table_extractor import GenericTableExtractor
from .lipid_bundle import LipidBundleExtractor
from .reading_order_probe import ProbeResult, ReadingOrderProbe, probe_results_to_patch
from .row_label_parser import RowLabelParser
from .sweep import RecognitionSweep

__all__ = [
    # orchestrator
    "CheckupParser",
    "CheckupParserSettings",
    # errors
    "CheckupParseError",
    "NoDocumentError",
    "NoTableError",
    "EmptyResultsError",
    "require_tables",
    "require_values",
    # extractors
    "GenericTableExtractor",
    "RowLabelParser",
    "LipidBundleExtractor",
    "ReadingOrderProbe",
    "ProbeResult",
    "probe_results_to_patch",
    # sweep
    "RecognitionSweep",
]
