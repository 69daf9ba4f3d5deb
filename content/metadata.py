"""토큰 메타데이터 모듈 — tokenURI의 data URI, JSON, SVG 트레이트 목록을 해석한다."""

import base64
import binascii
import json
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from urllib.parse import urlparse

# description에는 이스케이프되지 않은 문자가 섞여 있어 JSON 파싱 전에 제거한다
_DESCRIPTION_RE = re.compile(r'("description":\s")(.+)(",)')

_SVG_NS = "http://www.w3.org/2000/svg"
_XLINK_HREF = "{http://www.w3.org/1999/xlink}href"


class MetadataError(ValueError):
    """메타데이터 해석 실패."""


@dataclass
class DataURI:
    """디코딩된 data URI."""
    content_type: str
    raw: bytes


@dataclass
class Attribute:
    trait_type: str
    value: object


@dataclass
class Metadata:
    """ERC-721 토큰 메타데이터."""
    name: str = ""
    description: str = ""
    attributes: list[Attribute] = field(default_factory=list)
    image: str = ""
    image_data: str = ""
    animation_url: str = ""

    def decode_image(self) -> DataURI | None:
        return decode_data_uri(self.image)

    def decode_image_data(self) -> DataURI | None:
        return decode_data_uri(self.image_data)


def decode_data_uri(uri: str) -> DataURI | None:
    """data:<type>;base64,<payload> (또는 base32) 를 디코딩한다. data URI가 아니면 None."""
    if urlparse(uri).scheme != "data":
        return None
    try:
        header, payload = uri[len("data:"):].split(",", 1)
    except ValueError:
        raise MetadataError("data URI에 ',' 구분자가 없음") from None

    content_type, _, encoding = header.partition(";")
    try:
        if encoding == "base64":
            raw = base64.b64decode(payload)
        elif encoding == "base32":
            raw = base64.b32decode(payload)
        else:
            raw = payload.encode()
    except (binascii.Error, ValueError) as e:
        raise MetadataError(f"data URI 디코딩 실패: {e}") from e
    return DataURI(content_type=content_type, raw=raw)


def parse_metadata(raw: bytes | str) -> Metadata:
    """메타데이터 JSON을 Metadata로 변환한다."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    raw = _DESCRIPTION_RE.sub("", raw)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MetadataError(f"메타데이터 JSON 파싱 실패: {e}") from e
    if not isinstance(data, dict):
        raise MetadataError("메타데이터가 JSON 객체가 아님")

    attributes = [
        Attribute(trait_type=a.get("trait_type", ""), value=a.get("value"))
        for a in data.get("attributes") or []
        if isinstance(a, dict)
    ]
    return Metadata(
        name=data.get("name", ""),
        description=data.get("description", ""),
        attributes=attributes,
        image=data.get("image", ""),
        image_data=data.get("image_data", ""),
        animation_url=data.get("animation_url", ""),
    )


def parse_token_uri(token_uri: str) -> Metadata:
    """tokenURI (data:application/json;base64,...) 를 해석한다."""
    decoded = decode_data_uri(token_uri)
    if decoded is None:
        raise MetadataError(f"지원하지 않는 tokenURI: {token_uri[:64]}")
    return parse_metadata(decoded.raw)


def collect_image_hrefs(svg: bytes | str) -> list[str]:
    """SVG 루트의 <image> 요소 href를 문서 순서대로 반환한다."""
    try:
        root = ET.fromstring(svg)
    except ET.ParseError as e:
        raise MetadataError(f"SVG 파싱 실패: {e}") from e
    if root.tag not in ("svg", f"{{{_SVG_NS}}}svg"):
        raise MetadataError(f"루트 요소가 svg가 아님: {root.tag}")

    hrefs = []
    for child in root:
        if child.tag not in ("image", f"{{{_SVG_NS}}}image"):
            continue
        href = child.get("href") or child.get(_XLINK_HREF)
        if href:
            hrefs.append(href)
    return hrefs


def trait_urls(metadata: Metadata) -> list[str]:
    """메타데이터에 임베드된 SVG에서 트레이트 이미지 URL 목록을 뽑는다."""
    svg = metadata.decode_image_data()
    if svg is None:
        raise MetadataError("image_data가 data URI가 아님")
    return collect_image_hrefs(svg.raw)
