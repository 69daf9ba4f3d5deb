"""시민 이미지 캔버스 관리 모듈."""

from PIL import Image

# 기본 캔버스 크기 (트레이트 원본 해상도)
WIDTH = 1200
HEIGHT = 1200

TRANSPARENT = (0, 0, 0, 0)


class Canvas:
    """렌더링 1회가 소유하는 RGBA 캔버스."""

    def __init__(self, size: tuple[int, int] = (WIDTH, HEIGHT)):
        self._size = size
        self._image = Image.new("RGBA", size, TRANSPARENT)

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def paste(self, layer: Image.Image, position: tuple = (0, 0)) -> None:
        """레이어를 캔버스 위에 합성한다 (source-over 알파 블렌딩)."""
        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        self._image = Image.alpha_composite(self._image, _place(layer, position, self._size))


def _place(layer: Image.Image, position: tuple, size: tuple[int, int]) -> Image.Image:
    """레이어를 캔버스 크기에 맞춰 지정 위치에 배치한다. 넘치는 부분은 잘린다."""
    if layer.size == size and position == (0, 0):
        return layer
    result = Image.new("RGBA", size, TRANSPARENT)
    result.paste(layer, position)
    return result
