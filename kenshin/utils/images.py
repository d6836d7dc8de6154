"""이미지 처리 유틸리티"""

import io
from pathlib import Path
from typing import Tuple

from PIL import Image


def load_image(file_path: str | Path) -> Image.Image:
    """이미지 파일 로드"""
    return Image.open(file_path)


def load_image_from_bytes(data: bytes) -> Image.Image:
    """바이트 데이터에서 이미지 로드 (디코딩까지 즉시 수행)"""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def image_to_bytes(image: Image.Image, format: str = "PNG", quality: int | None = None) -> bytes:
    """이미지를 바이트로 변환 (JPEG는 RGB로 변환 후 저장)"""
    buffer = io.BytesIO()
    if format.upper() in ("JPEG", "JPG") and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    if quality is not None:
        image.save(buffer, format=format, quality=quality)
    else:
        image.save(buffer, format=format)
    return buffer.getvalue()


def resize_long_edge(image: Image.Image, max_long_edge: int) -> Image.Image:
    """긴 변이 max_long_edge 이하가 되도록 비율 유지 축소 (이미 작으면 그대로)"""
    long_edge = max(image.width, image.height)
    if long_edge <= max_long_edge:
        return image

    scale = max_long_edge / long_edge
    new_size = (max(1, int(image.width * scale)), max(1, int(image.height * scale)))

    return image.resize(new_size, Image.Resampling.LANCZOS)


def crop_normalized(image: Image.Image, rect: Tuple[float, float, float, float]) -> Image.Image:
    """정규화 좌표 (x, y, w, h) 영역으로 자르기 (픽셀 경계로 반올림)"""
    x, y, w, h = rect
    left = int(round(x * image.width))
    top = int(round(y * image.height))
    right = int(round((x + w) * image.width))
    bottom = int(round((y + h) * image.height))
    left, top = max(0, left), max(0, top)
    right, bottom = min(image.width, right), min(image.height, bottom)
    if right <= left or bottom <= top:
        raise ValueError(f"잘못된 크롭 영역: {rect}")
    return image.crop((left, top, right, bottom))
