"""인식 스윕 (크기/크롭 변형 재인식)

첫 인식에서 표가 하나도 나오지 않았을 때, 원본 이미지를 여러 크기로 줄이고
고정 크롭 창으로 잘라 인식기에 다시 보내 놓친 표 구조를 회수합니다.

- 전체 패스 수 = 크기 수 x 크롭 수 (기본 3 x 6 = 18)
- 패스는 엄격히 순차 실행 (동시 인식 호출 없음, 진행 카운터 단조 증가)
- 패스 단위 실패는 기록만 하고 계속 진행 (스윕 전체를 중단하지 않음)
- 회수한 표는 지문(fingerprint)으로 중복 제거 (처음 나온 표만 유지)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from PIL import UnidentifiedImageError

from kenshin.models.envelopes import ParseProgress, Table
from kenshin.services.recognition.base import BaseDocumentRecognizer
from kenshin.utils.images import (
    crop_normalized,
    image_to_bytes,
    load_image_from_bytes,
    resize_long_edge,
)

logger = logging.getLogger(__name__)

ProgressCB = Optional[Callable[[ParseProgress], None]]


@dataclass(frozen=True)
class CropWindow:
    """정규화 좌표 크롭 창 (x, y, 너비, 높이 - 모두 0..1)"""
    x: float
    y: float
    width: float
    height: float

    def as_tuple(self):
        return (self.x, self.y, self.width, self.height)


DEFAULT_CROPS: List[CropWindow] = [
    CropWindow(0.0, 0.0, 1.0, 1.0),     # 전체
    CropWindow(0.0, 0.0, 0.5, 0.5),     # 좌상
    CropWindow(0.5, 0.0, 0.5, 0.5),     # 우상
    CropWindow(0.0, 0.5, 0.5, 0.5),     # 좌하
    CropWindow(0.5, 0.5, 0.5, 0.5),     # 우하
    CropWindow(0.25, 0.25, 0.5, 0.5),   # 중앙
]


@dataclass
class Settings:
    """스윕 설정값.

    - long_edges: 목표 긴 변 크기 목록 (큰 것부터)
    - crops: 정규화 크롭 창 목록
    - image_format / jpeg_quality: 재인코딩 형식과 품질
    - fingerprint_rows / fingerprint_cols: 지문에 쓰는 앞쪽 행/열 수
    """
    long_edges: List[int] = field(default_factory=lambda: [2400, 1800, 1400])
    crops: List[CropWindow] = field(default_factory=lambda: list(DEFAULT_CROPS))
    image_format: str = "JPEG"
    jpeg_quality: int = 90
    fingerprint_rows: int = 6
    fingerprint_cols: int = 6


def table_fingerprint(table: Table, rows: int = 6, cols: int = 6) -> str:
    """표의 모양과 앞쪽 셀 텍스트로 만든 대략적 지문

    형식: "{행수}x{최대열수}:" + 앞 rows 행의 앞 cols 셀을 "|" 로, 행은 "||" 로 연결
    """
    body = "||".join(
        "|".join(cell.text.replace("\n", " ") for cell in row[:cols])
        for row in table.rows[:rows]
    )
    return f"{table.row_count}x{table.max_cols}:{body}"


def dedupe_tables(tables: List[Table], rows: int = 6, cols: int = 6) -> List[Table]:
    """지문이 같은 표 중 처음 나온 것만 유지"""
    seen: Set[str] = set()
    out: List[Table] = []
    for t in tables:
        fp = table_fingerprint(t, rows, cols)
        if fp in seen:
            continue
        seen.add(fp)
        out.append(t)
    return out


class RecognitionSweep:
    """크기/크롭 변형 재인식으로 표를 회수하는 스윕"""

    def __init__(self, recognizer: BaseDocumentRecognizer, settings: Optional[Settings] = None):
        self.recognizer = recognizer
        self.settings = settings or Settings()

    @staticmethod
    def _emit(progress: ParseProgress, progress_cb: ProgressCB) -> None:
        if progress_cb is None:
            return
        try:
            progress_cb(progress)
        except Exception as e:
            # 콜백 오류는 스윕을 중단시키지 않음
            logger.debug(f"진행 콜백 오류 무시: {e}")

    @property
    def total_passes(self) -> int:
        return len(self.settings.long_edges) * len(self.settings.crops)

    async def find_tables(self, image_bytes: bytes, progress_cb: ProgressCB = None) -> List[Table]:
        """변형 이미지들을 순차 재인식하고 중복 제거된 표 목록 반환

        Args:
            image_bytes: 원본 이미지 바이트
            progress_cb: 진행 콜백 (ParseProgress 를 받음)

        Returns:
            회수한 표 목록 (디코딩 실패 시 빈 리스트)
        """
        s = self.settings
        try:
            base = load_image_from_bytes(image_bytes)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"스윕 이미지 디코딩 실패: {e}")
            return []

        found: List[Table] = []
        total = self.total_passes
        done = 0
        n_crops = len(s.crops)

        for target in s.long_edges:
            self._emit(ParseProgress(
                completed=done, total=total,
                phase="Preparing Images",
                detail=f"Downscaling to {int(target)} px",
            ), progress_cb)
            scaled = resize_long_edge(base, int(target))

            for i, crop in enumerate(s.crops):
                done += 1
                self._emit(ParseProgress(
                    completed=done, total=total,
                    phase="Reading Tables...",
                    detail=f"Scale {int(target)} • Crop {i + 1}/{n_crops}",
                ), progress_cb)

                try:
                    sub = crop_normalized(scaled, crop.as_tuple())
                    sub_bytes = image_to_bytes(sub, format=s.image_format, quality=s.jpeg_quality)
                    envelope = await self.recognizer.recognize(sub_bytes)
                except Exception as e:
                    logger.error(f"스윕 단계 실패 (scale={target}, crop={i + 1}/{n_crops}): {e}")
                    continue

                if envelope is not None and envelope.data.tables:
                    logger.info(
                        f"스윕 표 발견: scale={target}, crop={i + 1}/{n_crops}, "
                        f"tables={len(envelope.data.tables)}"
                    )
                    found.extend(envelope.data.tables)

        self._emit(ParseProgress(
            completed=total, total=total,
            phase="Merging results...",
            detail="De-duplicating tables",
        ), progress_cb)

        unique = dedupe_tables(found, s.fingerprint_rows, s.fingerprint_cols)
        logger.info(f"스윕 완료: 발견 {len(found)}개 → 중복 제거 후 {len(unique)}개")
        return unique


__all__ = [
    "CropWindow",
    "DEFAULT_CROPS",
    "Settings",
    "RecognitionSweep",
    "table_fingerprint",
    "dedupe_tables",
]
