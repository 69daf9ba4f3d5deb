"""렌더링 옵션 모듈."""

from dataclasses import dataclass

from .canvas import WIDTH, HEIGHT


@dataclass(frozen=True)
class RenderFlags:
    """렌더링 1회 동안 변하지 않는 옵션 묶음."""
    width: int = WIDTH
    height: int = HEIGHT
    no_background: bool = False
    add_hat_overlay: bool = False
    snowball_mode: bool = False
    no_clothes: bool = False
    portrait_mode: bool = False
    preview_mode: bool = False
    female_variant: bool = False     # 참고용. URL 치환은 업스트림에서 끝난다
    background_override_color: tuple[int, int, int, int] | None = None

    @property
    def crops(self) -> bool:
        """PFP/미리보기 크롭이 고정 크기 리사이즈보다 우선한다."""
        return self.portrait_mode or self.preview_mode
