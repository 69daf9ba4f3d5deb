"""픽셀 스캐너 모듈 — 머리/헬멧 레이어의 최상단 픽셀을 찾아 PFP 크롭 기준점을 잡는다.

알파 채널만 보고, 이미지 밖 좌표는 투명으로 취급한다.
"""

from dataclasses import dataclass

from PIL import Image

# 기준점 정책 (refined: 기본, legacy: 초기 출력 재현용)
REFINED = "refined"
LEGACY = "legacy"


@dataclass(frozen=True)
class AnchorPolicy:
    """크롭 기준점 계산 규칙."""
    name: str
    margin: int          # 감지된 윗변 위로 남길 여백
    window: int          # 주변 탐색 반경 (0이면 탐색 안 함)
    default: int | None  # None이면 캔버스 높이 // 12
    pad_empty: bool = True  # 불투명 픽셀이 없어도 margin을 뺀다

    def initial(self, canvas_height: int) -> int:
        """후보 레이어가 없을 때 쓰는 기본 기준점."""
        if self.default is None:
            return canvas_height // 12
        return self.default


POLICIES = {
    REFINED: AnchorPolicy(REFINED, margin=40, window=128, default=128),
    LEGACY: AnchorPolicy(LEGACY, margin=10, window=0, default=None, pad_empty=False),
}


def get_policy(name: str) -> AnchorPolicy:
    """이름으로 정책을 찾는다."""
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"알 수 없는 기준점 정책: {name}") from None


def _alpha(image: Image.Image) -> Image.Image:
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return image.getchannel("A")


def _top_row(alpha: Image.Image, box: tuple[int, int, int, int]) -> int | None:
    """box 안에서 알파가 0이 아닌 가장 위 행을 반환한다. box는 이미지 범위로 잘린다."""
    w, h = alpha.size
    left, top, right, bottom = box
    left, top = max(0, left), max(0, top)
    right, bottom = min(w, right), min(h, bottom)
    if left >= right or top >= bottom:
        return None
    bbox = alpha.crop((left, top, right, bottom)).getbbox()
    if bbox is None:
        return None
    return top + bbox[1]


def find_anchor(image: Image.Image, x: int, policy: AnchorPolicy = POLICIES[REFINED]) -> int:
    """x열을 위에서부터 훑어 첫 불투명 픽셀 행을 찾고 여백을 뺀 값을 반환한다.

    refined 정책은 그 행 주변 [x-window, x+window) × [y-window, y+window)
    영역에서 더 위에 있는 픽셀이 있으면 그 행을 채택한다. 머리카락 한 가닥이나
    안티앨리어싱 때문에 중앙 열이 윤곽선을 놓치는 경우를 보정한다.

    불투명 픽셀이 하나도 없으면 0 - margin 이 된다 (음수 가능, 호출자가 보정).
    legacy 정책은 이 경우 0을 반환한다.
    """
    alpha = _alpha(image)
    highest = _top_row(alpha, (x, 0, x + 1, alpha.height))
    if highest is None:
        if not policy.pad_empty:
            return 0
        highest = 0

    if policy.window > 0:
        r = policy.window
        refined = _top_row(alpha, (x - r, highest - r, x + r, highest + r))
        if refined is not None and refined < highest:
            highest = refined

    return highest - policy.margin


def compute_anchor(images: list[Image.Image], x: int, canvas_height: int,
                   policy: AnchorPolicy = POLICIES[REFINED]) -> int:
    """후보 레이어들 중 가장 위쪽 기준점을 구한다. 기본값보다 아래로는 내려가지 않는다."""
    anchor = policy.initial(canvas_height)
    for image in images:
        found = find_anchor(image, x, policy)
        if found < anchor:
            anchor = found
    return anchor
