from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from kenshin.models.envelopes import CheckupPatch, DocumentData, MergePolicy, ParseProgress, Table
from kenshin.services.recognition.base import BaseDocumentRecognizer

from .errors import NoDocumentError
from .generic_table_extractor import GenericTableExtractor
from .lipid_bundle import LipidBundleExtractor
from .reading_order_probe import ProbeResult, ReadingOrderProbe, probe_results_to_patch
from .reference.analyte_lexicon import AnalyteLexicon, get_analyte_lexicon
from .row_label_parser import RowLabelParser
from .sweep import RecognitionSweep
from .table_inspector import document_inventory, dump_table, dump_tables, pick_best_table

logger = logging.getLogger(__name__)

ProgressCB = Optional[Callable[[ParseProgress], None]]


@dataclass
class Settings:
    """파서 동작 설정값.

    - probe_lookahead: 프로브 탐색 줄 수
    - merge_probe_results: 표가 끝내 없을 때 프로브 결과를 반환 패치에 병합할지 여부.
      기본 False 에서는 프로브가 진단용으로만 실행되고 빈 패치를 반환합니다.
    - debug: 문서/표 덤프 로그 출력 여부
    """
    probe_lookahead: int = 6
    merge_probe_results: bool = False
    debug: bool = False


class CheckupParser:
    """
    검진 결과지 파싱 오케스트레이터:
    1) 인식: 원본 이미지 → 문서 (없으면 NoDocumentError)
    2) 표가 없으면 스윕으로 변형 이미지 재인식, 회수한 표 채택
    3) 표가 있으면: 범용 추출 → 행 라벨 파서 → 지질 묶음 순으로 PREFER_EXISTING 병합
       병합 결과가 비면 프로브를 진단용으로 실행
    4) 표가 끝내 없으면: 프로브 실행 후 빈 패치 반환 (merge_probe_results 로 병합 가능)

    의존성은 생성자 주입으로 전달합니다. 값이 None이면 기본 구성을 만듭니다.
    - recognizer: BaseDocumentRecognizer (필수)
    - lexicon: AnalyteLexicon (기본: get_analyte_lexicon())
    - generic / row_parser / lipid / probe / sweep: 각 추출 단계 구현체
    """

    def __init__(
        self,
        recognizer: BaseDocumentRecognizer,
        *,
        lexicon: Optional[AnalyteLexicon] = None,
        generic: Optional[GenericTableExtractor] = None,
        row_parser: Optional[RowLabelParser] = None,
        lipid: Optional[LipidBundleExtractor] = None,
        probe: Optional[ReadingOrderProbe] = None,
        sweep: Optional[RecognitionSweep] = None,
        settings: Optional[Settings] = None,
        progress_cb: ProgressCB = None,
    ) -> None:
        self.recognizer = recognizer
        self.lexicon = lexicon or get_analyte_lexicon()
        self.generic = generic or GenericTableExtractor()
        self.row_parser = row_parser or RowLabelParser()
        self.lipid = lipid or LipidBundleExtractor()
        self.probe = probe or ReadingOrderProbe(self.lexicon, lipid=self.lipid)
        self.sweep = sweep or RecognitionSweep(recognizer)
        self.settings = settings or Settings()
        self._progress_cb = progress_cb

    # ---------- DI 편의 생성자 ----------
    @classmethod
    def create_with_deps(cls, *, progress_cb: ProgressCB = None) -> "CheckupParser":
        """중앙 DI 프로바이더(kenshin.core.deps)를 통해 의존성을 주입하여 파서를 생성합니다."""
        from kenshin.core.deps import (
            get_lexicon,
            get_parser_settings,
            get_probe,
            get_recognizer_service,
            get_row_parser,
            get_sweep,
        )

        return cls(
            get_recognizer_service(),
            lexicon=get_lexicon(),
            row_parser=get_row_parser(),
            probe=get_probe(),
            sweep=get_sweep(),
            settings=get_parser_settings(),
            progress_cb=progress_cb,
        )

    # ---------- 내부 유틸 ----------
    def _emit(self, progress: ParseProgress, progress_cb: ProgressCB = None) -> None:
        cb = progress_cb or self._progress_cb
        if cb:
            try:
                cb(progress)
            except Exception as e:
                # 콜백 오류는 파이프라인을 중단시키지 않음
                logger.debug(f"진행 콜백 오류 무시: {e}")

    def _log_document(self, document: DocumentData) -> None:
        if not self.settings.debug:
            return
        logger.debug(document_inventory(document))
        best = pick_best_table(document.tables)
        if best is not None:
            logger.debug(dump_table(best, header="LARGEST TABLE"))

    # ---------- 추출 단계 ----------
    def extract_from_tables(self, tables: List[Table]) -> CheckupPatch:
        """세 가지 표 추출 전략을 순서대로 PREFER_EXISTING 병합"""
        merged = self.generic.extract(tables)
        logger.info(f"범용 추출 결과: {len(merged.filled_fields())}개 필드")

        merged = merged.merge(self.row_parser.extract(tables), MergePolicy.PREFER_EXISTING)
        merged = merged.merge(self.lipid.extract(tables), MergePolicy.PREFER_EXISTING)

        logger.info(f"표 추출 병합 결과: {sorted(merged.filled_fields())}")
        return merged

    def run_probe(self, document: DocumentData) -> List[ProbeResult]:
        return self.probe.probe_document(document, lookahead=self.settings.probe_lookahead)

    # ---------- 공개 API ----------
    async def parse_checkup(self, image_bytes: bytes, progress_cb: ProgressCB = None) -> CheckupPatch:
        """이미지 bytes 를 검진 결과 패치로 변환합니다.

        Args:
            image_bytes: 단일 페이지 이미지 바이트
            progress_cb: 진행 콜백 (ParseProgress 를 받음, 제어 흐름에 영향 없음)

        Returns:
            CheckupPatch (모든 필드가 비어 있을 수 있음)

        Raises:
            NoDocumentError: 인식기가 문서를 찾지 못한 경우
        """
        envelope = await self.recognizer.recognize(image_bytes)
        if envelope is None:
            raise NoDocumentError()

        document = envelope.data
        self._log_document(document)
        tables = list(document.tables)
        logger.info(f"문서 인식 완료: tables={len(tables)}, lines={len(document.text_lines)}")

        if not tables:
            cb = progress_cb or self._progress_cb
            swept = await self.sweep.find_tables(image_bytes, progress_cb=lambda p: self._emit(p, cb))
            if swept:
                logger.info(f"스윕으로 표 {len(swept)}개 회수")
                if self.settings.debug:
                    logger.debug(dump_tables(swept))
                tables = swept

        if tables:
            merged = self.extract_from_tables(tables)
            if merged.is_empty:
                # 진단용: 결과는 반환 패치에 반영하지 않음
                self.run_probe(document)
            return merged

        results = self.run_probe(document)
        if self.settings.merge_probe_results:
            return probe_results_to_patch(results)
        return CheckupPatch()

    def parse_checkup_blocking(self, image_bytes: bytes, progress_cb: ProgressCB = None) -> CheckupPatch:
        """동기 호출자(스크립트 등)용 래퍼"""
        return asyncio.run(self.parse_checkup(image_bytes, progress_cb=progress_cb))


__all__ = ["Settings", "CheckupParser"]
