"""레이어 선택 모듈 — 옵션에 따라 레이어를 그리거나, 바꾸거나, 건너뛴다."""

from PIL import Image

from .assets import OverlayAssets
from .canvas import WIDTH, HEIGHT
from .flags import RenderFlags
from .layers import DrawOp, FetchedLayer, LayerKind, LayerRole

# 크롭 기준점 계산에 쓰는 레이어 종류
ANCHOR_KINDS = (LayerKind.HELM, LayerKind.HAIR)

# 300x300으로 잘못 올라간 몸통 에셋 보정 조건
_BROKEN_BODY_SIZE = (300, 300)
_BROKEN_BODY_SUFFIX = "5.png"


def _needs_body_repair(layer: FetchedLayer, repair_buckets: tuple[str, ...]) -> bool:
    # TODO: 원본 에셋이 재업로드되면 이 보정과 render.body_repair_buckets 설정을 제거한다
    return (
        layer.kind is LayerKind.BODY
        and any(bucket in layer.source for bucket in repair_buckets)
        and layer.source.endswith(_BROKEN_BODY_SUFFIX)
        and layer.image.size == _BROKEN_BODY_SIZE
    )


def select(
    layers: list[FetchedLayer],
    flags: RenderFlags,
    assets: OverlayAssets = OverlayAssets(),
    canvas_size: tuple[int, int] = (WIDTH, HEIGHT),
    repair_buckets: tuple[str, ...] = (),
) -> list[DrawOp]:
    """입력 순서를 유지한 채 그릴 레이어 목록을 만든다.

    - 모자 옵션이면 모자 레이어를 맨 뒤에 붙여 가장 위에 그린다.
    - 배경 역할 레이어는 단색으로 바꾸거나 (override) 빼거나 (no-bg/미리보기) 한다.
    - 눈덩이 모드에서는 무기를 빼고 손을 눈덩이 쥔 주먹으로 바꾼다.
    - 옷 제거 옵션이면 옷 레이어를 뺀다.
    """
    working = list(layers)
    if flags.add_hat_overlay and assets.hat is not None:
        working.append(FetchedLayer(assets.hat, "", LayerKind.HAT))

    snowball_fist = assets.snowball_fist() if flags.snowball_mode else None

    ops: list[DrawOp] = []
    for layer in working:
        image = layer.image
        anchor = layer.kind in ANCHOR_KINDS

        if _needs_body_repair(layer, repair_buckets):
            image = image.resize(canvas_size, Image.Resampling.NEAREST)

        if layer.kind is LayerKind.CLOTH and flags.no_clothes:
            continue

        if layer.role is LayerRole.BACKGROUND:
            if flags.background_override_color is not None:
                fill = Image.new("RGBA", canvas_size, flags.background_override_color)
                ops.append(DrawOp(fill, is_background_fill=True))
                continue
            if flags.no_background or flags.preview_mode:
                continue

        if flags.snowball_mode and layer.kind is LayerKind.WEAPON:
            continue

        if flags.snowball_mode and layer.kind is LayerKind.HAND and snowball_fist is not None:
            image = snowball_fist

        ops.append(DrawOp(image, anchor_candidate=anchor))

    return ops
