"""출력 모듈 — 합성된 캔버스를 최종 크기로 리사이즈하거나 PFP로 자른다.

픽셀아트 트레이트의 선명한 경계를 지키기 위해 항상 최근접 보간만 쓴다.
"""

from PIL import Image

from .flags import RenderFlags

PORTRAIT_SIZE = 640


def resize_nearest(image: Image.Image, width: int, height: int) -> Image.Image:
    """최근접 보간 리사이즈. 0인 변은 원본 비율을 유지하도록 계산한다."""
    src_w, src_h = image.size
    if width <= 0 and height <= 0:
        return image
    if width <= 0:
        width = max(1, int(src_w * height / src_h + 0.5))
    elif height <= 0:
        height = max(1, int(src_h * width / src_w + 0.5))
    return image.resize((width, height), Image.Resampling.NEAREST)


def portrait_box(canvas_size: tuple[int, int], anchor: int,
                 size: int = PORTRAIT_SIZE) -> tuple[int, int, int, int]:
    """PFP 크롭 영역 (left, top, right, bottom).

    기준점이 음수면 위쪽을 0으로 당기고 아래쪽을 같은 만큼 늘려 높이를 유지한다.
    """
    start_x = canvas_size[0] // 2
    start_y = anchor
    end_y = start_y + size
    if start_y < 0:
        end_y -= start_y
        start_y = 0
    half = size // 2
    return (start_x - half, start_y, start_x - half + size, end_y)


def shape(canvas: Image.Image, flags: RenderFlags, anchor: int,
          portrait_size: int = PORTRAIT_SIZE) -> Image.Image:
    """PFP/미리보기면 기준점 크롭, 아니면 요청 크기로 리사이즈한다."""
    if flags.crops:
        return canvas.crop(portrait_box(canvas.size, anchor, portrait_size))

    w, h = canvas.size
    rw = flags.width if w != flags.width else 0
    rh = flags.height if h != flags.height else 0
    if rw > 0 or rh > 0:
        return resize_nearest(canvas, rw, rh)
    return canvas
