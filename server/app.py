"""HTTP 서버 모듈 — 시민 이미지 렌더링 / teardown / 파트 / 업스케일 엔드포인트."""

import asyncio
import logging
from io import BytesIO

from aiohttp import web
from PIL import Image, UnidentifiedImageError

from content.chain import TokenURIClient, TokenURIError, resolve_token_uri
from content.fetch import LayerFetcher
from content.metadata import DataURI, MetadataError, parse_token_uri, trait_urls
from content.traits import female_variant_url, part_map
from renderer.assets import load_assets
from renderer.generator import CitizenGenerator
from renderer.layers import FetchedLayer
from renderer.flags import RenderFlags
from renderer.scanner import get_policy
from renderer.shaper import resize_nearest
from .cache import ImageCache
from .request import RenderRequest, RequestError, parse_size, parse_token_id

logger = logging.getLogger(__name__)

PNG = "image/png"
SVG = "image/svg+xml"

# 파트 /render 확대 배율
PART_RENDER_SCALE = 2


def encode_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class CitizenService:
    """엔드포인트 핸들러 묶음. 의존성은 생성자로 받는다."""

    def __init__(
        self,
        generator: CitizenGenerator,
        token_client: TokenURIClient,
        fetcher: LayerFetcher,
        cache: ImageCache,
        contracts: dict,
        parts: dict | None = None,
        legacy_parts: dict | None = None,
    ):
        self._generator = generator
        self._token_client = token_client
        self._fetcher = fetcher
        self._cache = cache
        self._contracts = contracts
        self._parts = parts or {}
        self._legacy_parts = legacy_parts or {}

    def _season(self, request: web.Request) -> int:
        season = int(request.match_info["season"])
        if str(season) not in self._contracts:
            raise web.HTTPNotFound(text=f"unknown season: {season}")
        return season

    async def _token_uri(self, season: int, token_id: int) -> str:
        return await resolve_token_uri(self._token_client, self._contracts[str(season)], token_id)

    async def healthcheck(self, request: web.Request) -> web.Response:
        return web.Response(text="OK")

    async def render(self, request: web.Request) -> web.Response:
        """GET /s{season}/{dimensions}/{id} — 시민 이미지를 PNG로 반환한다."""
        season = self._season(request)
        try:
            req = RenderRequest.from_params(
                season, request.match_info["dimensions"], request.match_info["id"], request.query,
            )
        except RequestError as e:
            raise web.HTTPBadRequest(text=str(e))

        key = req.cache_key(request.path)
        loop = asyncio.get_running_loop()
        cached = await loop.run_in_executor(None, self._cache.get, key)
        if cached is not None:
            return web.Response(body=cached, content_type=PNG)

        try:
            metadata = parse_token_uri(await self._token_uri(season, req.token_id))
            urls = trait_urls(metadata)
        except (TokenURIError, MetadataError) as e:
            raise web.HTTPBadRequest(text=str(e))

        if req.flags.female_variant:
            urls = [female_variant_url(url, season) for url in urls]

        layers = await self._fetcher.fetch_layers(urls)
        if not layers:
            raise web.HTTPBadGateway(text="트레이트 레이어를 하나도 받지 못함")

        png = await loop.run_in_executor(None, self._render_png, layers, req.flags)
        await loop.run_in_executor(None, self._cache.put, key, png)

        logger.info("렌더링 완료: %s (%d 레이어, %d 바이트)", key, len(layers), len(png))
        return web.Response(body=png, content_type=PNG)

    def _render_png(self, layers: list[FetchedLayer], flags: RenderFlags) -> bytes:
        return encode_png(self._generator.render(layers, flags))

    async def teardown(self, request: web.Request) -> web.Response:
        """GET /s{season}/{id}/teardown — 파트 이름 → 트레이트 URL."""
        season = self._season(request)
        try:
            token_id = parse_token_id(request.match_info["id"])
        except RequestError as e:
            raise web.HTTPBadRequest(text=str(e))

        try:
            token_uri = await self._token_uri(season, token_id)
        except TokenURIError as e:
            raise web.HTTPNotFound(text=str(e))

        try:
            urls = trait_urls(parse_token_uri(token_uri))
        except MetadataError as e:
            raise web.HTTPBadRequest(text=str(e))
        return web.json_response(part_map(urls))

    async def part(self, request: web.Request) -> web.Response:
        """GET /s{season}/parts/{part}/{id} — 파트 토큰의 이미지 리소스를 그대로 반환한다."""
        decoded = await self._part_image(request)
        return web.Response(body=decoded.raw, headers={"Content-Type": decoded.content_type})

    async def part_render(self, request: web.Request) -> web.Response:
        """GET /s{season}/parts/{part}/{id}/render — SVG 파트를 2배 크기 PNG로 래스터화한다.

        SVG가 아닌 리소스는 /parts 와 같이 그대로 반환한다.
        """
        decoded = await self._part_image(request)
        if decoded.content_type != SVG:
            return web.Response(body=decoded.raw, headers={"Content-Type": decoded.content_type})

        loop = asyncio.get_running_loop()
        try:
            png = await loop.run_in_executor(None, _rasterize_svg, decoded.raw, PART_RENDER_SCALE)
        # 잘못된 SVG는 cairosvg가 ParseError (SyntaxError) 로 알린다
        except (ValueError, SyntaxError, OSError) as e:
            logger.error("파트 래스터화 실패: %s (%s)", request.path, e)
            raise web.HTTPInternalServerError(text=f"파트 래스터화 실패: {e}")
        return web.Response(body=png, content_type=PNG)

    async def _part_image(self, request: web.Request) -> DataURI:
        season = str(self._season(request))
        part_type = request.match_info["part"].lower()
        try:
            token_id = parse_token_id(request.match_info["id"])
        except RequestError as e:
            raise web.HTTPBadRequest(text=str(e))

        contracts = {
            "current": self._parts.get(season, {}).get(part_type, ""),
            "legacy": self._legacy_parts.get(season, {}).get(part_type, ""),
        }
        if not contracts["current"]:
            raise web.HTTPBadRequest(text="unknown part")

        try:
            token_uri = await resolve_token_uri(self._token_client, contracts, token_id)
            decoded = parse_token_uri(token_uri).decode_image()
        except (TokenURIError, MetadataError) as e:
            raise web.HTTPInternalServerError(text=str(e))
        if decoded is None:
            raise web.HTTPInternalServerError(text="이미지가 data URI가 아님")
        return decoded

    async def upscale(self, request: web.Request) -> web.Response:
        """POST /upscale?size=WxH — 업로드된 이미지를 최근접 보간으로 리사이즈한다."""
        try:
            width, height = parse_size(request.query.get("size", ""))
        except RequestError as e:
            raise web.HTTPBadRequest(text=str(e))

        body = await request.read()
        loop = asyncio.get_running_loop()
        try:
            png = await loop.run_in_executor(None, _upscale_png, body, width, height)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise web.HTTPBadRequest(text=f"이미지 디코딩 실패: {e}")
        return web.Response(body=png, content_type=PNG)


def _upscale_png(data: bytes, width: int, height: int) -> bytes:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return encode_png(resize_nearest(img, width, height))


def _rasterize_svg(svg: bytes, scale: float) -> bytes:
    import cairosvg
    return cairosvg.svg2png(bytestring=svg, scale=scale)


def create_app(service: CitizenService) -> web.Application:
    """라우트를 등록한 aiohttp 애플리케이션을 만든다."""
    app = web.Application()
    app.add_routes([
        web.get("/healthcheck", service.healthcheck),
        # teardown이 /s{season}/{dimensions}/{id} 보다 먼저 매칭되어야 한다
        web.get(r"/s{season:\d+}/{id}/teardown", service.teardown),
        web.get(r"/s{season:\d+}/parts/{part}/{id}/render", service.part_render),
        web.get(r"/s{season:\d+}/parts/{part}/{id}", service.part),
        web.get(r"/s{season:\d+}/{dimensions}/{id}", service.render),
        web.post("/upscale", service.upscale),
    ])
    return app


def build_service(config: dict) -> CitizenService:
    """설정으로 실제 의존성을 조립한다."""
    render_cfg = config["render"]
    size = render_cfg.get("canvas_size", 1200)
    generator = CitizenGenerator(
        assets=load_assets(config["assets"].get("directory", "assets/")),
        canvas_size=(size, size),
        portrait_size=render_cfg.get("portrait_size", 640),
        anchor_policy=get_policy(render_cfg.get("anchor_policy", "refined")),
        repair_buckets=tuple(render_cfg.get("body_repair_buckets", [])),
    )
    chain_cfg = config["chain"]
    if not chain_cfg.get("rpc_url"):
        logger.warning("RPC URL 없음, tokenURI 조회가 실패합니다")
    return CitizenService(
        generator=generator,
        token_client=TokenURIClient(chain_cfg.get("rpc_url", ""), chain_cfg.get("timeout_sec", 10)),
        fetcher=LayerFetcher(config["fetch"].get("timeout_sec", 30)),
        cache=ImageCache(config["cache"].get("directory", "images/"),
                         enabled=config["cache"].get("enabled", True)),
        contracts=chain_cfg.get("contracts", {}),
        parts=chain_cfg.get("parts", {}),
        legacy_parts=chain_cfg.get("legacy_parts", {}),
    )
