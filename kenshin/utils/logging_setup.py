"""
로깅 초기화 유틸리티

- setup_logging(): config/logging.yml 로깅 설정을 불러오고, 없으면 기본 로깅으로 대체
"""
from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML

from kenshin.settings import ROOT_DIR, settings

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def load_logging_config(path: Path) -> Dict[str, Any]:
    """로깅 YAML 을 dict 로 로드 (파일이 없거나 비어 있으면 빈 dict)"""
    if not path.exists():
        return {}
    yaml = YAML(typ="safe")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.load(f) or {}
    return data if isinstance(data, dict) else {}


def setup_logging(config_path: Optional[str] = None, level: Optional[str] = None) -> None:
    """로깅 설정을 초기화합니다.

    - 프로젝트 루트 기준 `config/logging.yml` 파일이 있으면 이를 로드해 로깅을 구성합니다.
    - 없으면 기본 로깅 설정(basicConfig)으로 대체합니다.
    - level 을 주면(또는 settings.log_level) kenshin 로거 레벨을 덮어씁니다.

    Args:
        config_path: 프로젝트 루트 기준 로깅 YAML 파일의 상대 경로 (None이면 설정값)
        level: 로그 레벨 문자열 (None이면 settings.log_level)
    """
    rel = config_path or settings.logging_config_path
    cfg_path = Path(rel) if Path(rel).is_absolute() else ROOT_DIR / rel
    level_name = (level or settings.log_level or "INFO").upper()

    data = load_logging_config(cfg_path)
    if data:
        logging.config.dictConfig(data)
    else:
        logging.basicConfig(level=level_name, format=DEFAULT_FORMAT)

    logging.getLogger("kenshin").setLevel(level_name)
    logger.debug(f"로깅 초기화 완료: config={cfg_path if data else 'basicConfig'}, level={level_name}")
