"""문서 인식기 기본 인터페이스

모든 문서 인식기(DummyRecognizer, PaddleStructureRecognizer)가 상속하는 기본 인터페이스.
통일된 DocumentEnvelope 반환 타입 사용.

반환 규약:
- DocumentEnvelope: 문서 인식 성공 (표가 0개일 수 있음)
- None: 이미지에서 문서를 찾지 못함
- 예외: 인식 엔진 오류 (호출자가 처리 - 스윕은 기록 후 계속, 최상위 파서는 전파)

다양한 입력 타입 지원:
- PIL Image (recognize_image) - 핵심 추상 메서드
- bytes (recognize_bytes)
- 비동기 bytes (recognize) - 기본 executor 에서 recognize_bytes 실행
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Literal, Optional

from PIL import Image

from kenshin.models.envelopes import DocumentData, DocumentEnvelope, DocumentMeta, Table
from kenshin.utils.images import load_image_from_bytes

logger = logging.getLogger(__name__)


class BaseDocumentRecognizer(ABC):
    """문서 인식기 기본 추상 클래스

    필수 구현:
        - recognize_image(Image.Image): 핵심 추상 메서드

    기본 구현 제공 (오버라이드 가능):
        - recognize_bytes(bytes): Pillow로 디코딩 후 recognize_image 호출
        - recognize(bytes): 비동기 래퍼
    """

    engine_name: str = "BaseRecognizer"

    @abstractmethod
    def recognize_image(self, image: Image.Image) -> Optional[DocumentEnvelope]:
        """이미지에서 문서 구조(표/텍스트 라인) 인식

        Args:
            image: PIL Image 객체

        Returns:
            DocumentEnvelope 또는 None (문서 없음)
        """
        pass

    def recognize_bytes(self, image_bytes: bytes) -> Optional[DocumentEnvelope]:
        """바이트 데이터에서 문서 인식

        디코딩 실패는 예외로 전파됩니다.

        Args:
            image_bytes: 이미지 바이트 데이터

        Returns:
            DocumentEnvelope 또는 None (문서 없음)
        """
        image = load_image_from_bytes(image_bytes)
        return self.recognize_image(image)

    async def recognize(self, image_bytes: bytes) -> Optional[DocumentEnvelope]:
        """비동기 인식 (블로킹 추론을 기본 executor 에서 실행)"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.recognize_bytes(image_bytes))

    def _create_document_envelope(
        self,
        tables: List[Table],
        text_lines: List[str],
        *,
        lists: Optional[List[List[str]]] = None,
        paragraphs: Optional[List[str]] = None,
        title: Optional[str] = None,
        source: Literal["bytes", "image", "sweep"] = "image",
        lang: str = "unknown",
    ) -> DocumentEnvelope:
        """DocumentEnvelope 생성 헬퍼

        Args:
            tables: 인식된 표 목록
            text_lines: 읽기 순서 텍스트 라인
            source: 입력 소스 타입
            lang: 인식 언어

        Returns:
            DocumentEnvelope
        """
        return DocumentEnvelope(
            stage="recognize",
            data=DocumentData(
                title=title,
                tables=tables,
                text_lines=text_lines,
                lists=lists or [],
                paragraphs=paragraphs or [],
            ),
            meta=DocumentMeta(
                tables=len(tables),
                lines=len(text_lines),
                source=source,
                lang=lang,
                engine=self.engine_name,
            ),
        )


__all__ = [
    "BaseDocumentRecognizer",
]
