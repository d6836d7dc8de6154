"""애플리케이션 설정 관리"""

import importlib.util
from pathlib import Path
from typing import List, Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# .env 파일 로드
load_dotenv()

# 프로젝트 루트 디렉토리
ROOT_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 문서 인식기 설정
    recognizer_provider: Literal["paddle", "dummy"] = Field(
        default="paddle", description="문서 인식기 제공자 (paddle | dummy)"
    )
    recognizer_lang: str = Field(default="japan", description="인식 언어 (PaddleOCR lang 코드)")
    recognizer_use_gpu: bool = Field(default=False, description="인식기 GPU 사용 여부")

    # 스윕 설정
    sweep_long_edges: List[int] = Field(
        default=[2400, 1800, 1400], description="스윕 목표 긴 변 크기 (큰 것부터)"
    )
    sweep_jpeg_quality: int = Field(default=90, description="스윕 재인코딩 JPEG 품질")

    # 추출 설정
    probe_lookahead: int = Field(default=6, description="읽기 순서 프로브 탐색 줄 수")
    row_value_start_col: int = Field(default=3, description="행 라벨 파서 값 탐색 시작 열")
    merge_probe_results: bool = Field(
        default=False,
        description="표가 없을 때 프로브 결과를 반환 패치에 병합할지 여부",
    )

    # 앱 설정
    app_debug: bool = Field(default=False, description="디버그 모드 (문서/표 덤프 로그)")
    log_level: str = Field(default="INFO", description="로그 레벨")
    logging_config_path: str = Field(
        default="config/logging.yml", description="로깅 YAML 경로 (프로젝트 루트 기준)"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()


def validate_settings() -> dict[str, str]:
    """설정 유효성 검사 및 경고 메시지 반환"""
    warnings = {}

    # 인식기 설정 검증
    if settings.recognizer_provider == "paddle":
        if importlib.util.find_spec("paddleocr") is None:
            warnings["recognizer"] = (
                "PaddleOCR 인식기 사용을 위해서는 paddleocr 패키지가 필요합니다. "
                "pip install -e .[paddle] 로 설치해주세요."
            )

    # 스윕 설정 검증
    edges = settings.sweep_long_edges
    if not edges:
        warnings["sweep"] = "스윕 크기 목록이 비어 있어 스윕이 아무 것도 하지 않습니다."
    elif any(e <= 0 for e in edges):
        warnings["sweep"] = f"스윕 크기는 양수여야 합니다: {edges}"
    elif edges != sorted(edges, reverse=True):
        warnings["sweep"] = f"스윕 크기는 큰 것부터 정렬되어야 합니다: {edges}"

    if not 1 <= settings.sweep_jpeg_quality <= 100:
        warnings["sweep_quality"] = (
            f"JPEG 품질은 1~100 이어야 합니다: {settings.sweep_jpeg_quality}"
        )

    return warnings
