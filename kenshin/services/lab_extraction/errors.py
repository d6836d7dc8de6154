"""검진 결과 파싱 오류 정의

- NoDocumentError: 인식기가 문서를 찾지 못함 (해당 호출에 치명적)
- NoTableError: 구조(표)를 찾지 못함 - 엄격 모드 호출자용 (require_tables)
- EmptyResultsError: 값이 하나도 추출되지 않음 - 엄격 모드 호출자용 (require_values)
"""
from __future__ import annotations

from typing import List

from kenshin.models.envelopes import CheckupPatch, Table


class CheckupParseError(Exception):
    """파싱 오류 기본 클래스 (사용자에게 보여줄 메시지를 가짐)"""

    default_message = "Checkup parsing failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoDocumentError(CheckupParseError):
    default_message = "No document detected in the image."


class NoTableError(CheckupParseError):
    default_message = "No table detected. Try a straighter photo with better lighting."


class EmptyResultsError(CheckupParseError):
    default_message = "Couldn’t extract any values from the table."


def require_tables(tables: List[Table]) -> List[Table]:
    """표가 없으면 NoTableError (빈 패치를 실패로 다루려는 호출자용)"""
    if not tables:
        raise NoTableError()
    return tables


def require_values(patch: CheckupPatch) -> CheckupPatch:
    """패치가 비어 있으면 EmptyResultsError"""
    if patch.is_empty:
        raise EmptyResultsError()
    return patch


__all__ = [
    "CheckupParseError",
    "NoDocumentError",
    "NoTableError",
    "EmptyResultsError",
    "require_tables",
    "require_values",
]
