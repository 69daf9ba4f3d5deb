"""요청 해석 모듈 — 경로/쿼리 파라미터를 RenderFlags와 캐시 키로 바꾼다."""

from dataclasses import dataclass

from content.background import ColorError, parse_background_color
from renderer.flags import RenderFlags

PFP = "pfp"


class RequestError(ValueError):
    """잘못된 요청 파라미터."""


def parse_size(value: str) -> tuple[int, int]:
    """'WxH' 문자열을 (너비, 높이) 로 변환한다."""
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise RequestError("invalid length")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise RequestError(str(e)) from None
    if width <= 0 or height <= 0:
        raise RequestError(f"크기는 양수여야 함: {value}")
    return width, height


def parse_token_id(value: str) -> int:
    try:
        token_id = int(value)
    except ValueError:
        raise RequestError(f"잘못된 토큰 ID: {value}") from None
    if token_id < 0:
        raise RequestError(f"잘못된 토큰 ID: {value}")
    return token_id


def _flag(query, name: str) -> bool:
    # 값과 상관없이 비어 있지 않으면 켜진 것으로 본다
    return query.get(name, "") != ""


@dataclass(frozen=True)
class RenderRequest:
    """시민 렌더링 요청 하나."""
    season: int
    token_id: int
    dimensions: str
    flags: RenderFlags
    bg_color: str = ""

    @classmethod
    def from_params(cls, season: int, dimensions: str, token_id: str, query) -> "RenderRequest":
        """경로 파라미터와 쿼리 (Mapping) 로 요청을 만든다."""
        pfp = dimensions.lower() == PFP
        if pfp:
            width, height = 1200, 1200
        else:
            width, height = parse_size(dimensions)

        preview = _flag(query, "crop_preview")
        bg_color = query.get("bg-color", "")
        color = None
        # 미리보기에서는 배경색 옵션을 무시한다
        if bg_color and not preview:
            try:
                color = parse_background_color(bg_color)
            except ColorError as e:
                raise RequestError(str(e)) from None

        flags = RenderFlags(
            width=width,
            height=height,
            no_background=_flag(query, "no-bg"),
            add_hat_overlay=_flag(query, "santa-hat"),
            snowball_mode=_flag(query, "snowball"),
            no_clothes=_flag(query, "no-clothes"),
            portrait_mode=pfp,
            preview_mode=preview,
            female_variant=_flag(query, "female"),
            background_override_color=color,
        )
        return cls(season, parse_token_id(token_id), dimensions, flags, bg_color)

    def cache_key(self, path: str) -> str:
        """요청 경로에 옵션 접미사를 붙인 캐시 키. 접미사 순서는 고정이다."""
        flags = self.flags
        key = path
        if flags.preview_mode:
            key += "_crop_preview"
        else:
            if flags.background_override_color is not None:
                key += "_bg_color_" + self.bg_color
            if flags.portrait_mode:
                key += "_pfp_crop"
            if flags.no_background:
                key += "_no_bg"
        if flags.add_hat_overlay:
            key += "_santa"
        if flags.snowball_mode:
            key += "_snowball"
        if flags.female_variant:
            key += "_female"
        if flags.no_clothes:
            key += "_nc"
        return key
