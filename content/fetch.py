"""트레이트 레이어 다운로드 모듈 — IPFS 게이트웨이에서 PNG/JPEG를 받아 디코딩한다."""

import asyncio
import logging
from io import BytesIO

import aiohttp
from PIL import Image, UnidentifiedImageError

from renderer.layers import FetchedLayer
from .traits import classify_layer

logger = logging.getLogger(__name__)


def decode_layer(data: bytes) -> Image.Image:
    """이미지 바이트를 RGBA 이미지로 디코딩한다."""
    with Image.open(BytesIO(data)) as img:
        return img.convert("RGBA")


class LayerFetcher:
    """트레이트 URL 목록을 받아 FetchedLayer 목록을 만든다."""

    def __init__(self, timeout_sec: float = 30):
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)

    async def fetch_layers(self, urls: list[str]) -> list[FetchedLayer]:
        """모든 URL을 동시에 받는다. 순서는 입력 순서를 따른다.

        실패한 레이어는 로그만 남기고 건너뛴다. 분류 (종류/역할) 는 SVG 안의
        원래 위치 기준이다.
        """
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            images = await asyncio.gather(*(self._fetch(session, url) for url in urls))

        layers = []
        for index, (url, image) in enumerate(zip(urls, images)):
            if image is None:
                continue
            layers.append(FetchedLayer(image, url, *classify_layer(url, index)))
        return layers

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> Image.Image | None:
        try:
            async with session.get(url) as resp:
                resp.raise_for_status()
                data = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("레이어 다운로드 실패: %s (%s)", url, e)
            return None

        try:
            return decode_layer(data)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning("레이어 디코딩 실패: %s (%s)", url, e)
            return None
