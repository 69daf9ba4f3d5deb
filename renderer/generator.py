"""시민 이미지 생성 모듈 — 선택 → 합성 → 출력 파이프라인."""

import logging

from PIL import Image

from .assets import OverlayAssets
from .canvas import WIDTH, HEIGHT
from .flags import RenderFlags
from .layers import FetchedLayer, LayerCompositor
from .scanner import AnchorPolicy, POLICIES, REFINED, compute_anchor
from .selector import select
from .shaper import PORTRAIT_SIZE, shape

logger = logging.getLogger(__name__)


class CitizenGenerator:
    """트레이트 레이어로 시민 이미지를 만든다.

    서비스 시작 시 한 번 만들고 요청마다 render()를 호출한다. 내부 상태는
    읽기 전용이라 여러 스레드에서 동시에 써도 된다.
    """

    def __init__(
        self,
        assets: OverlayAssets = OverlayAssets(),
        canvas_size: tuple[int, int] = (WIDTH, HEIGHT),
        portrait_size: int = PORTRAIT_SIZE,
        anchor_policy: AnchorPolicy = POLICIES[REFINED],
        repair_buckets: tuple[str, ...] = (),
    ):
        self._assets = assets
        self._compositor = LayerCompositor(canvas_size)
        self._portrait_size = portrait_size
        self._anchor_policy = anchor_policy
        self._repair_buckets = tuple(repair_buckets)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._compositor.size

    def render(self, layers: list[FetchedLayer], flags: RenderFlags) -> Image.Image:
        """레이어와 옵션으로 최종 이미지를 만든다. 같은 입력이면 같은 픽셀이 나온다."""
        ops = select(layers, flags, self._assets, self.canvas_size, self._repair_buckets)
        logger.debug("레이어 %d개 중 %d개 합성", len(layers), len(ops))

        canvas = self._compositor.compose(ops)

        width, height = self.canvas_size
        anchor = compute_anchor(
            [op.image for op in ops if op.anchor_candidate],
            width // 2, height, self._anchor_policy,
        )
        return shape(canvas, flags, anchor, self._portrait_size)
