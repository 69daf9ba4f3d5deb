"""레이어 합성 모듈 — 트레이트 레이어를 순서대로 캔버스에 합성한다."""

from dataclasses import dataclass
from enum import Enum

from PIL import Image

from .canvas import Canvas, WIDTH, HEIGHT


class LayerKind(Enum):
    """트레이트 레이어 종류. 업스트림 분류기가 붙인다."""
    BACKGROUND = "background"
    BODY = "body"
    HEAD = "head"
    HAND = "hand"
    WEAPON = "weapon"
    CLOTH = "cloth"
    HAIR = "hair"
    HELM = "helm"
    HAT = "hat"          # 합성용 시즌 모자
    OTHER = "other"


class LayerRole(Enum):
    """레이어 역할. 배경 역할은 첫 레이어에만 붙는다."""
    BACKGROUND = "background"
    TRAIT = "trait"


@dataclass(frozen=True)
class FetchedLayer:
    """디코딩이 끝난 트레이트 레이어."""
    image: Image.Image
    source: str                      # 원본 fetch URL (불투명 식별자)
    kind: LayerKind = LayerKind.OTHER
    role: LayerRole = LayerRole.TRAIT


@dataclass(frozen=True)
class DrawOp:
    """캔버스에 그릴 레이어 하나."""
    image: Image.Image
    is_background_fill: bool = False
    anchor_candidate: bool = False


class LayerCompositor:
    """DrawOp 리스트를 순서대로 합성하여 캔버스를 만든다."""

    def __init__(self, size: tuple[int, int] = (WIDTH, HEIGHT)):
        self._size = size

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def compose(self, draw_ops: list[DrawOp]) -> Image.Image:
        """새 캔버스에 draw_ops를 원점 (0, 0) 기준으로 차례로 합성한다.

        나중 레이어가 앞 레이어를 가린다. 호출마다 캔버스를 새로 만들므로
        동시에 여러 요청이 같은 compositor를 써도 된다.

        Returns:
            합성된 RGBA 이미지
        """
        canvas = Canvas(self._size)
        for op in draw_ops:
            canvas.paste(op.image)
        return canvas.image
