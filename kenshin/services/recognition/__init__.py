"""문서 인식기 패키지

이미지에서 표 구조와 읽기 순서 텍스트를 인식해 DocumentEnvelope 로 반환합니다.

주요 모듈:
- base: 인식기 기본 인터페이스 (BaseDocumentRecognizer)
- paddle_structure: PP-StructureV3 기반 구현체 (PaddleStructureRecognizer)
- dummy_recognizer: 테스트용 더미 구현체 (DummyRecognizer)
- html_table: 표 HTML → 셀 격자 변환
- factory: 인식기 팩토리 함수
"""

from .base import BaseDocumentRecognizer
from .dummy_recognizer import DummyRecognizer
from .paddle_structure import PaddleStructureRecognizer
from .factory import get_recognizer

__all__ = [
    # 기본 인터페이스
    "BaseDocumentRecognizer",
    # 구현체
    "DummyRecognizer",
    "PaddleStructureRecognizer",
    # 팩토리
    "get_recognizer",
]
