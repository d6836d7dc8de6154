"""PaddleOCR PP-StructureV3 기반 문서 인식기

표 구조(HTML)와 읽기 순서 텍스트 라인을 함께 인식해 DocumentEnvelope 로 반환합니다.
일본어 검진 결과지를 기본 대상으로 lang='japan' 을 사용합니다.

사용 예시:
    from kenshin.services.recognition.paddle_structure import PaddleStructureRecognizer

    recognizer = PaddleStructureRecognizer(lang="japan", use_gpu=False)
    envelope = recognizer.recognize_bytes(image_bytes)
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from kenshin.models.envelopes import DocumentEnvelope, Table
from .base import BaseDocumentRecognizer
from .html_table import parse_html_table

logger = logging.getLogger(__name__)

# PP-StructureV3 레이아웃 블록 라벨
TITLE_LABELS = {"doc_title", "paragraph_title"}
TEXT_LABELS = {"text", "paragraph", "abstract", "content"}
LIST_LABELS = {"list"}


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """결과 객체에서 속성/딕셔너리 키 어느 쪽이든 읽기"""
    if isinstance(obj, dict):
        return obj.get(key, default)
    try:
        return obj[key]
    except (KeyError, TypeError, IndexError):
        return getattr(obj, key, default)


class PaddleStructureRecognizer(BaseDocumentRecognizer):
    """PP-StructureV3 문서 구조 인식기

    - 엔진은 첫 호출 시 생성 (lazy initialization)
    - 같은 인스턴스의 추론 호출은 RLock 으로 직렬화

    Attributes:
        lang: 인식 언어 (기본값: 'japan')
        use_gpu: GPU 사용 여부
    """

    engine_name = "PPStructureV3"

    def __init__(self, lang: str = "japan", use_gpu: bool = False, **kwargs):
        """
        Args:
            lang: 인식 언어 ('japan', 'en' 등)
            use_gpu: GPU 사용 여부
            **kwargs: 추가 PPStructureV3 옵션
        """
        self.lang = lang
        self.use_gpu = use_gpu
        self._engine = None
        self._init_kwargs = kwargs.copy()
        self._lock = threading.RLock()
        logger.info(f"PP-StructureV3 인식기 초기화: lang={lang}, use_gpu={use_gpu}")

    @property
    def engine(self):
        """PPStructureV3 인스턴스 (lazy initialization)"""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self):
        try:
            from paddleocr import PPStructureV3
        except ImportError as e:
            raise ImportError(
                "paddleocr 패키지가 설치되지 않았습니다. "
                "pip install -e .[paddle] 로 설치해주세요."
            ) from e

        paddle_kwargs: Dict[str, Any] = {
            "lang": self.lang,
            "device": "gpu" if self.use_gpu else "cpu",
            "use_doc_orientation_classify": True,
            "use_doc_unwarping": False,
            "use_table_recognition": True,
        }
        paddle_kwargs.update(self._init_kwargs)
        logger.info(f"PPStructureV3 생성: {paddle_kwargs}")
        return PPStructureV3(**paddle_kwargs)

    # ---------- 결과 변환 ----------
    @staticmethod
    def _to_bgr_array(image: Image.Image) -> np.ndarray:
        arr = np.asarray(image.convert("RGB"))
        return np.ascontiguousarray(arr[:, :, ::-1])

    @staticmethod
    def _tables_from_result(page: Any) -> List[Table]:
        tables: List[Table] = []
        for t in _get(page, "table_res_list", None) or []:
            html = _get(t, "pred_html", "") or ""
            rows = parse_html_table(html)
            if rows:
                tables.append(Table.from_texts(rows))
        return tables

    @staticmethod
    def _blocks_from_result(page: Any) -> Tuple[Optional[str], List[str], List[List[str]]]:
        """레이아웃 블록에서 제목/문단/목록 추출"""
        title: Optional[str] = None
        paragraphs: List[str] = []
        lists: List[List[str]] = []
        for block in _get(page, "parsing_res_list", None) or []:
            label = str(_get(block, "block_label", "") or _get(block, "label", "") or "")
            content = str(_get(block, "block_content", "") or _get(block, "content", "") or "").strip()
            if not content:
                continue
            if label in TITLE_LABELS and title is None:
                title = content
            elif label in TEXT_LABELS:
                paragraphs.append(content)
            elif label in LIST_LABELS:
                lists.append([ln.strip() for ln in content.splitlines() if ln.strip()])
        return title, paragraphs, lists

    @staticmethod
    def _lines_from_result(page: Any) -> List[str]:
        ocr = _get(page, "overall_ocr_res", None)
        if ocr is None:
            return []
        texts = _get(ocr, "rec_texts", None) or []
        return [str(t) for t in texts if str(t).strip()]

    def _convert(self, raw_results: Any) -> Optional[DocumentEnvelope]:
        if not raw_results:
            return None
        page = raw_results[0] if isinstance(raw_results, list) else raw_results

        tables = self._tables_from_result(page)
        lines = self._lines_from_result(page)
        title, paragraphs, lists = self._blocks_from_result(page)

        if not tables and not lines and not paragraphs:
            logger.info("인식 결과 없음: 문서를 찾지 못했습니다.")
            return None

        logger.info(f"문서 구조 변환 완료: tables={len(tables)}, lines={len(lines)}")
        return self._create_document_envelope(
            tables=tables,
            text_lines=lines,
            lists=lists,
            paragraphs=paragraphs,
            title=title,
            source="image",
            lang=self.lang,
        )

    # ---------- 인식 ----------
    def recognize_image(self, image: Image.Image) -> Optional[DocumentEnvelope]:
        """PIL 이미지에서 문서 구조 인식 (엔진 오류는 전파)"""
        arr = self._to_bgr_array(image)
        with self._lock:
            raw = self.engine.predict(arr)
        return self._convert(list(raw) if raw is not None else None)


__all__ = ["PaddleStructureRecognizer"]
