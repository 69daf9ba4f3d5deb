"""레이어 선택 테스트 — 옵션별 포함/제외/치환 규칙."""

from PIL import Image

from renderer.assets import OverlayAssets
from renderer.flags import RenderFlags
from renderer.layers import FetchedLayer, LayerKind, LayerRole
from renderer.selector import select

SIZE = (8, 8)


def solid(color, size=SIZE) -> Image.Image:
    return Image.new("RGBA", size, color)


def layer(kind: LayerKind, color=(10, 20, 30, 255), role=LayerRole.TRAIT, source="") -> FetchedLayer:
    return FetchedLayer(solid(color), source or f"https://x/ipfs/Qm1/{kind.value}/1.png", kind, role)


def citizen() -> list[FetchedLayer]:
    return [
        layer(LayerKind.BACKGROUND, (255, 0, 0, 255), LayerRole.BACKGROUND),
        layer(LayerKind.BODY, (0, 0, 255, 255)),
        layer(LayerKind.CLOTH, (0, 255, 0, 255)),
        layer(LayerKind.HAND, (1, 1, 1, 255)),
        layer(LayerKind.WEAPON, (255, 255, 255, 255)),
        layer(LayerKind.HAIR, (9, 9, 9, 255)),
    ]


def test_default_flags_keep_order():
    layers = citizen()
    ops = select(layers, RenderFlags(), canvas_size=SIZE)
    assert [op.image for op in ops] == [l.image for l in layers]
    assert not any(op.is_background_fill for op in ops)


def test_anchor_candidates_are_hair_and_helm():
    layers = citizen() + [layer(LayerKind.HELM)]
    ops = select(layers, RenderFlags(), canvas_size=SIZE)
    assert [op.anchor_candidate for op in ops] == [False, False, False, False, False, True, True]


def test_hat_is_appended_last():
    hat = solid((200, 0, 0, 255))
    ops = select(citizen(), RenderFlags(add_hat_overlay=True), OverlayAssets(hat=hat), SIZE)
    assert len(ops) == 7
    assert ops[-1].image is hat
    assert not ops[-1].anchor_candidate


def test_missing_hat_is_skipped():
    ops = select(citizen(), RenderFlags(add_hat_overlay=True), OverlayAssets(), SIZE)
    assert len(ops) == 6


def test_no_clothes_drops_cloth():
    layers = citizen()
    ops = select(layers, RenderFlags(no_clothes=True), canvas_size=SIZE)
    assert layers[2].image not in [op.image for op in ops]
    assert len(ops) == 5


def test_no_background_and_preview_drop_first_layer():
    layers = citizen()
    for flags in (RenderFlags(no_background=True), RenderFlags(preview_mode=True)):
        ops = select(layers, flags, canvas_size=SIZE)
        assert [op.image for op in ops] == [l.image for l in layers[1:]]


def test_background_override_replaces_first_layer():
    color = (0xFA, 0xAC, 0x27, 0xFF)
    layers = citizen()
    ops = select(layers, RenderFlags(background_override_color=color, no_background=True), canvas_size=SIZE)
    assert len(ops) == len(layers)
    fill = ops[0]
    assert fill.is_background_fill
    assert fill.image.size == SIZE
    assert fill.image.getcolors() == [(64, color)]


def test_background_kind_without_background_role_is_a_normal_layer():
    stray = layer(LayerKind.BACKGROUND)
    ops = select([layer(LayerKind.BODY), stray], RenderFlags(no_background=True), canvas_size=SIZE)
    assert ops[1].image is stray.image


def test_snowball_mode_drops_weapon_and_swaps_hand():
    fist = solid((0, 0, 0, 0))
    snowball = solid((0, 0, 0, 0))
    snowball.putpixel((3, 3), (250, 250, 250, 255))
    assets = OverlayAssets(fist=fist, snowball=snowball)
    layers = citizen()

    ops = select(layers, RenderFlags(snowball_mode=True), assets, SIZE)

    images = [op.image for op in ops]
    assert layers[4].image not in images
    assert layers[3].image not in images
    hand = ops[3].image
    assert hand.getpixel((3, 3)) == (250, 250, 250, 255)
    assert hand.getpixel((0, 0)) == (0, 0, 0, 0)
    # 원본 에셋은 그대로
    assert fist.getpixel((3, 3)) == (0, 0, 0, 0)


def test_snowball_mode_without_fist_keeps_hand():
    layers = citizen()
    ops = select(layers, RenderFlags(snowball_mode=True), OverlayAssets(), SIZE)
    images = [op.image for op in ops]
    assert layers[3].image in images
    assert layers[4].image not in images


def test_broken_body_asset_is_upscaled():
    bucket = "QmBroken"
    small = FetchedLayer(solid((5, 5, 5, 255), (300, 300)),
                         f"https://gw/ipfs/{bucket}/body/5.png", LayerKind.BODY)
    other = FetchedLayer(solid((5, 5, 5, 255), (300, 300)),
                         f"https://gw/ipfs/{bucket}/body/4.png", LayerKind.BODY)

    ops = select([small, other], RenderFlags(), canvas_size=(600, 600), repair_buckets=(bucket,))

    assert ops[0].image.size == (600, 600)
    assert ops[1].image.size == (300, 300)
    assert select([small], RenderFlags(), canvas_size=(600, 600))[0].image.size == (300, 300)
