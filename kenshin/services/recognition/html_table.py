"""HTML 표 → 셀 격자 변환

구조 인식 엔진이 돌려주는 표 HTML(<table><tr><td ...>)을 행 우선 텍스트 격자로 바꿉니다.

- colspan: 첫 칸에만 텍스트, 나머지 칸은 빈 문자열 (값이 여러 열로 복제되지 않도록)
- rowspan: 아래 행들의 같은 열에 텍스트 복제 (묶음 라벨이 각 행에 남도록)
- 행마다 길이가 다를 수 있음 (뒤쪽 빈 칸은 잘라냄)
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from bs4 import BeautifulSoup


def _span(cell, attr: str) -> int:
    try:
        return max(1, int(str(cell.get(attr) or 1)))
    except ValueError:
        return 1


def _rstrip_empty(row: List[str]) -> List[str]:
    end = len(row)
    while end > 0 and not row[end - 1]:
        end -= 1
    return row[:end]


def parse_html_table(html: str) -> List[List[str]]:
    """표 HTML 을 List[List[str]] 격자로 변환

    Args:
        html: <table> 을 포함한 HTML 문자열

    Returns:
        행 목록 (각 행은 셀 텍스트 목록). <tr> 이 없으면 빈 리스트
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    trs = soup.find_all("tr")
    if not trs:
        return []

    grid: List[List[str]] = []
    pending: Dict[int, Tuple[str, int]] = {}  # 열 → (텍스트, 남은 행 수)

    def take_pending(row: List[str], col: int) -> None:
        text, remaining = pending[col]
        row.append(text)
        if remaining <= 1:
            del pending[col]
        else:
            pending[col] = (text, remaining - 1)

    for tr in trs:
        row: List[str] = []
        for td in tr.find_all(["th", "td"]):
            while len(row) in pending:
                take_pending(row, len(row))

            text = td.get_text(" ", strip=True)
            colspan = _span(td, "colspan")
            rowspan = _span(td, "rowspan")
            start = len(row)
            row.append(text)
            row.extend([""] * (colspan - 1))
            if rowspan > 1:
                pending[start] = (text, rowspan - 1)

        # 행 끝에 남은 rowspan 칸 채우기
        while pending and len(row) <= max(pending):
            if len(row) in pending:
                take_pending(row, len(row))
            else:
                row.append("")

        grid.append(_rstrip_empty(row))

    return grid


__all__ = ["parse_html_table"]
