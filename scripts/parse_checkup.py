#!/usr/bin/env python
"""검진 결과지 이미지 한 장을 파싱해 패치 JSON 을 출력합니다.

사용법:
    python scripts/parse_checkup.py path/to/checkup.jpg [--dummy] [--dump-tables]

--dump-tables: 인식된 표를 CSV 로 stderr 에 출력 (표 인식 확인용)
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = [a for a in argv if not a.startswith("--")]
    flags = {a for a in argv if a.startswith("--")}
    if not args:
        print("usage: parse_checkup.py IMAGE [--dummy] [--dump-tables]")
        return 2

    path = Path(args[0])
    if not path.exists():
        print(f"ERROR: file not found: {path}")
        return 2

    from kenshin.models.envelopes import ParseProgress, to_user_facing
    from kenshin.services.lab_extraction.checkup_parser import CheckupParser
    from kenshin.services.lab_extraction.errors import CheckupParseError
    from kenshin.services.lab_extraction.table_inspector import dump_tables_as_csv
    from kenshin.utils.logging_setup import setup_logging

    setup_logging()

    def on_progress(p: ParseProgress) -> None:
        shown = to_user_facing(p)
        print(f"[{shown.fraction:5.1%}] {shown.phase}", file=sys.stderr)

    if "--dummy" in flags:
        from kenshin.services.recognition.dummy_recognizer import DummyRecognizer
        parser = CheckupParser(DummyRecognizer(), progress_cb=on_progress)
    else:
        parser = CheckupParser.create_with_deps(progress_cb=on_progress)

    image_bytes = path.read_bytes()

    if "--dump-tables" in flags:
        envelope = parser.recognizer.recognize_bytes(image_bytes)
        tables = envelope.data.tables if envelope else []
        print(f"=== TABLES ({len(tables)}) ===", file=sys.stderr)
        print(dump_tables_as_csv(tables), file=sys.stderr)

    try:
        patch = parser.parse_checkup_blocking(image_bytes)
    except CheckupParseError as e:
        print(f"ERROR: {e.message}")
        return 1

    print(json.dumps(patch.model_dump(exclude_none=True), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
