"""문서 인식기 팩토리"""

from kenshin.settings import settings

from .base import BaseDocumentRecognizer
from .dummy_recognizer import DummyRecognizer
from .paddle_structure import PaddleStructureRecognizer


def get_recognizer() -> BaseDocumentRecognizer:
    """설정에 따라 적절한 문서 인식기 반환

    Returns:
        BaseDocumentRecognizer 인스턴스 (모두 DocumentEnvelope 반환)
    """
    if settings.recognizer_provider == "paddle":
        return PaddleStructureRecognizer(
            lang=settings.recognizer_lang,
            use_gpu=settings.recognizer_use_gpu,
        )
    elif settings.recognizer_provider == "dummy":
        return DummyRecognizer()
    else:
        raise ValueError(f"지원하지 않는 인식기 제공자: {settings.recognizer_provider}")
