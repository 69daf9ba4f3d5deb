"""배경색 모듈 — bg-color 쿼리 값을 RGBA로 변환한다."""

import re

# 희귀도별 배경색 단축 이름
RARITY_COLORS = {
    "elite": "faac27",    # 엘리트: 금색
    "default": "849ef3",
    "outer": "b0d774",
}

_HEX_RE = re.compile(r"^#?([a-fA-F0-9]{6})$")


class ColorError(ValueError):
    """배경색 문자열 오류."""


def parse_background_color(value: str) -> tuple[int, int, int, int]:
    """희귀도 이름 또는 6자리 16진수를 불투명 RGBA로 변환한다."""
    value = RARITY_COLORS.get(value.strip().lower(), value.strip())
    m = _HEX_RE.match(value)
    if not m:
        raise ColorError(f"잘못된 배경색 (16진수 6자리 필요): {value}")
    parsed = int(m.group(1), 16)
    return (parsed >> 16, (parsed >> 8) & 0xFF, parsed & 0xFF, 0xFF)
