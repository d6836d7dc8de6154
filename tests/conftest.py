"""테스트 픽스처 및 설정"""

from pathlib import Path

import pytest
from dotenv import load_dotenv
from PIL import Image

from kenshin.models.envelopes import DocumentData, Table
from kenshin.services.lab_extraction.reference.analyte_lexicon import get_analyte_lexicon
from kenshin.services.recognition.dummy_recognizer import DummyRecognizer, sample_checkup_document
from kenshin.utils.images import image_to_bytes

# 프로젝트 루트의 .env 파일 로드
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@pytest.fixture
def sample_image():
    """샘플 이미지 픽스처"""
    return Image.new("RGB", (400, 300), color="white")


@pytest.fixture
def sample_image_bytes(sample_image):
    """샘플 이미지 PNG 바이트"""
    return image_to_bytes(sample_image, format="PNG")


@pytest.fixture
def lexicon():
    """분석 항목 사전 픽스처"""
    return get_analyte_lexicon()


@pytest.fixture
def dummy_recognizer():
    """고정 검진 결과표를 돌려주는 더미 인식기"""
    return DummyRecognizer()


@pytest.fixture
def checkup_document():
    """더미 검진 결과표 문서"""
    return sample_checkup_document()


@pytest.fixture
def text_only_document():
    """표 없이 텍스트 라인만 있는 문서"""
    return DocumentData(text_lines=["AST 28 U/L", "ALT 31 U/L"])


@pytest.fixture
def panel_table():
    """값 열이 기준값 열 뒤에 오는 패널 표"""
    return Table.from_texts([
        ["項目名", "基準値", "単位", "結果"],
        ["白血球数", "3300-8600", "/µL", "6200"],
        ["赤血球数", "435-555", "万/µL", "452"],
        ["ヘモグロビン", "13.7-16.8", "g/dL", "14.2"],
        ["ヘモグロビンA1c", "4.6-6.2", "%", "5.6"],
        ["空腹時血糖", "70-109", "mmol/L", "5.5"],
    ])
