"""더미 문서 인식기 (테스트/데모용)

- 인자 없이 만들면 일본 건강검진 결과표 형태의 고정 문서를 반환합니다.
- responses 를 주면 호출마다 순서대로 꺼내 반환합니다.
  항목이 Exception 이면 raise, None 이면 "문서 없음", DocumentData 면 해당 문서.
  목록이 소진되면 fallback 을 반환합니다.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Sequence, Union

from PIL import Image

from kenshin.models.envelopes import DocumentData, DocumentEnvelope, Table
from .base import BaseDocumentRecognizer

Response = Union[DocumentData, Exception, None]


def sample_checkup_document() -> DocumentData:
    """더미 검진 결과표 문서"""
    table = Table.from_texts([
        ["検査項目", "今回", "単位", "基準値"],
        ["身長", "170.2", "cm", ""],
        ["体重", "65.4", "kg", ""],
        ["腹囲", "82.0", "cm", "84.9以下"],
        ["AST(GOT)", "28", "U/L", "30以下"],
        ["ALT(GPT)", "31", "U/L", "30以下"],
        ["γ-GT", "45", "U/L", "50以下"],
        ["空腹時血糖", "96", "mg/dL", "99以下"],
        ["HbA1c", "5.4", "%", "5.5以下"],
        ["総コレステロール", "210", "mg/dL", "140-199"],
        ["HDLコレステロール", "55", "mg/dL", "40以上"],
        ["LDLコレステロール", "130", "mg/dL", "60-119"],
        ["中性脂肪", "121", "mg/dL", "30-149"],
    ])
    lines = [" ".join(row) for row in table.row_texts()]
    return DocumentData(title="健康診断結果報告書", tables=[table], text_lines=lines)


class DummyRecognizer(BaseDocumentRecognizer):
    """테스트용 더미 문서 인식기

    Attributes:
        calls: recognize_image 호출 시 받은 이미지 크기 기록 (스윕 검증용)
    """

    engine_name = "DummyRecognizer"

    def __init__(
        self,
        responses: Optional[Sequence[Response]] = None,
        fallback: Response = None,
    ):
        self._queue: Optional[Deque[Response]] = deque(responses) if responses is not None else None
        self._fallback = fallback
        self.calls: List[tuple] = []

    def _next_response(self) -> Response:
        if self._queue is None:
            return sample_checkup_document()
        if self._queue:
            return self._queue.popleft()
        return self._fallback

    def recognize_image(self, image: Image.Image) -> Optional[DocumentEnvelope]:
        """다음 응답 반환 (Exception 이면 raise)

        Args:
            image: PIL Image 객체 (크기만 기록)

        Returns:
            DocumentEnvelope 또는 None
        """
        self.calls.append(image.size)
        resp = self._next_response()
        if isinstance(resp, Exception):
            raise resp
        if resp is None:
            return None
        return self._create_document_envelope(
            tables=resp.tables,
            text_lines=resp.text_lines,
            lists=resp.lists,
            paragraphs=resp.paragraphs,
            title=resp.title,
            source="bytes",
            lang="japan",
        )
