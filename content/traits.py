"""트레이트 URL 모듈 — IPFS 버킷, 여성 변형 치환, 레이어 분류."""

import re
from urllib.parse import urlparse

from renderer.layers import LayerKind, LayerRole

IPFS_RE = re.compile(r"(https://[\w.-]+/ipfs)/(Qm\w+)/(.+)")

# 시즌 → (남성, 여성) IPFS 버킷
IPFS_BUCKETS = {
    1: ("QmPLW6u5MRut1b8iyVc47ET5zAj9VaG2GwyjcuKLoetWsT",
        "QmPVfdHHdjyZb6BKHhwaJ1eEdCx9Jz4mvCn4KHiCJQaB8e"),
    2: ("QmeqeBpsYTuJL8AZhY9fGBeTj9QuvMVqaZeRWFnjA24QEE",
        "QmeqeBpsYTuJL8AZhY9fGBeTj9QuvMVqaZeRWFnjA24QEE"),
}

# 파트 이름에 포함된 표식 → 레이어 종류 (앞쪽이 우선)
_KIND_MARKERS = [
    ("weapon", LayerKind.WEAPON),
    ("hand", LayerKind.HAND),
    ("helm", LayerKind.HELM),
    ("hair", LayerKind.HAIR),
    ("cloth", LayerKind.CLOTH),
    ("body", LayerKind.BODY),
    ("head", LayerKind.HEAD),
    ("background", LayerKind.BACKGROUND),
]

_WORD_RE = re.compile(r"[a-z]+")

# 여성 변형에서 파일명을 바꾸는 파트
_GENDERED_PARTS = ("body", "hand", "head")


def part_name(url: str) -> str:
    """IPFS 해시 다음 경로 조각 (트레이트 파트 이름).

    IPFS URL이 아니면 파일명 바로 위 디렉토리 이름을 쓴다.
    """
    m = IPFS_RE.match(url)
    if m:
        return m.group(3).split("/")[0]
    segments = [s for s in urlparse(url).path.split("/") if s]
    if len(segments) >= 2:
        return segments[-2]
    return segments[0] if segments else ""


def layer_kind(url: str) -> LayerKind:
    """파트 이름으로 레이어 종류를 정한다.

    URL 전체가 아니라 파트 이름의 단어만 본다. 단어가 표식으로 시작해야 일치한다
    ("clothing", "helmet" 은 일치, "chair" 는 hair가 아님).
    """
    words = _WORD_RE.findall(part_name(url).lower())
    for marker, kind in _KIND_MARKERS:
        if any(word.startswith(marker) for word in words):
            return kind
    return LayerKind.OTHER


def layer_role(index: int) -> LayerRole:
    """SVG의 첫 이미지가 배경이다."""
    return LayerRole.BACKGROUND if index == 0 else LayerRole.TRAIT


def classify_layer(url: str, index: int) -> tuple[LayerKind, LayerRole]:
    """트레이트 URL과 SVG 안의 위치로 (종류, 역할) 을 정한다."""
    return layer_kind(url), layer_role(index)


def female_variant_url(url: str, season: int) -> str:
    """트레이트 URL을 시즌의 여성 버킷으로 바꾼다 (실험적).

    body/hand/head 파트의 기본 파일 (`0.png`) 은 `0-0.png`, 손은 `fist/0-0.png`.
    """
    buckets = IPFS_BUCKETS.get(season)
    m = IPFS_RE.match(url)
    if buckets is None or m is None:
        return url

    gateway, _, rest = m.groups()
    path = rest
    name = path.split("/")[0]
    if any(p in name for p in _GENDERED_PARTS) and "0.png" in path:
        replacement = "0-0.png"
        if "hand" in name:
            replacement = "fist/" + replacement
        path = f"{name}/{replacement}"
    return f"{gateway}/{buckets[1]}/{path}"


def part_map(hrefs: list[str]) -> dict[str, str]:
    """파트 이름 → URL (teardown 응답)."""
    return {part_name(href): href for href in hrefs}
