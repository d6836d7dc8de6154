"""표/문서 덤프 도구 (휴리스틱 튜닝용 디버그 출력)"""
from __future__ import annotations

import csv
import io
import logging
from typing import List, Optional

from kenshin.models.envelopes import DocumentData, Table

logger = logging.getLogger(__name__)


def _truncate(s: str, max_chars: int) -> str:
    s = s.replace("\n", " ")
    return s if len(s) <= max_chars else s[: max_chars - 1] + "…"


def dump_table(table: Table, header: str = "DOCUMENT TABLE DUMP") -> str:
    """표 하나를 셀 위치와 함께 그대로 덤프"""
    out: List[str] = [f"=== {header} ===", f"Rows: {table.row_count}, Max Cols: {table.max_cols}"]
    for r, row in enumerate(table.rows):
        out.append(f"-- Row {r} (cells: {len(row)})")
        for c, cell in enumerate(row):
            out.append(f"  [{r},{c}] \"{cell.text}\"")
    out.append(f"=== END {header} ===")
    return "\n".join(out)


def dump_tables(tables: List[Table], max_cells: int = 8, max_chars: int = 40) -> str:
    """여러 표 요약 덤프 (행당 앞 max_cells 셀, 셀당 max_chars 자)"""
    out: List[str] = [f"tables: {len(tables)}"]
    for t_idx, table in enumerate(tables):
        out.append(f"# table {t_idx}: rows={table.row_count}, maxCols={table.max_cols}")
        for r, row in enumerate(table.rows):
            cells = " | ".join(_truncate(c.text, max_chars) for c in row[:max_cells])
            more = " | …" if len(row) > max_cells else ""
            out.append(f"  r{r}: {cells}{more}")
    return "\n".join(out)


def dump_tables_as_csv(tables: List[Table]) -> str:
    """표들을 CSV 텍스트로 (표 사이는 빈 줄)"""
    buffers: List[str] = []
    for table in tables:
        buf = io.StringIO()
        writer = csv.writer(buf)
        for row in table.row_texts():
            writer.writerow(row)
        buffers.append(buf.getvalue())
    return "\n".join(buffers)


def document_inventory(document: DocumentData) -> str:
    """문서 구성 요약 (제목, 표, 목록, 문단, 라인 수)"""
    out: List[str] = ["=== DOCUMENT INVENTORY ==="]
    out.append(f"title: {document.title or '-'}")
    out.append(f"tables: {len(document.tables)}")
    for t_idx, table in enumerate(document.tables):
        out.append(f"  table {t_idx}: rows={table.row_count}, maxCols={table.max_cols}")
    out.append(f"lists: {len(document.lists)}")
    out.append(f"paragraphs: {len(document.paragraphs)}")
    out.append(f"lines: {len(document.text_lines)}")
    out.append("=== END DOCUMENT INVENTORY ===")
    return "\n".join(out)


def pick_best_table(tables: List[Table]) -> Optional[Table]:
    """가장 큰 표 (행 수 x 최대 열 수 기준, 동률이면 먼저 나온 표)"""
    best: Optional[Table] = None
    best_area = -1
    for t in tables:
        area = t.row_count * t.max_cols
        if area > best_area:
            best, best_area = t, area
    return best


__all__ = [
    "dump_table",
    "dump_tables",
    "dump_tables_as_csv",
    "document_inventory",
    "pick_best_table",
]
