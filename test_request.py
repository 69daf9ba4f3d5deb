"""요청 해석 / 디스크 캐시 테스트."""

import pytest

from server.cache import ImageCache
from server.request import RenderRequest, RequestError, parse_size


def test_parse_size():
    assert parse_size("600x400") == (600, 400)
    for bad in ("600", "ax4", "0x10", "1x2x3"):
        with pytest.raises(RequestError):
            parse_size(bad)


def test_fixed_size_request():
    req = RenderRequest.from_params(1, "600x600", "42", {"no-bg": "1", "snowball": "true"})
    assert req.token_id == 42
    assert (req.flags.width, req.flags.height) == (600, 600)
    assert req.flags.no_background and req.flags.snowball_mode
    assert not req.flags.portrait_mode


def test_pfp_request():
    req = RenderRequest.from_params(1, "PFP", "1", {})
    assert req.flags.portrait_mode
    assert (req.flags.width, req.flags.height) == (1200, 1200)


def test_bg_color_alias():
    req = RenderRequest.from_params(1, "pfp", "1", {"bg-color": "elite"})
    assert req.flags.background_override_color == (0xFA, 0xAC, 0x27, 0xFF)


def test_bad_params():
    with pytest.raises(RequestError):
        RenderRequest.from_params(1, "600x600", "abc", {})
    with pytest.raises(RequestError):
        RenderRequest.from_params(1, "600x600", "1", {"bg-color": "nothex"})


def test_empty_flag_value_is_off():
    req = RenderRequest.from_params(1, "600x600", "1", {"no-bg": ""})
    assert not req.flags.no_background


def test_cache_key_suffix_order():
    query = {"bg-color": "elite", "no-bg": "1", "santa-hat": "1", "snowball": "1",
             "female": "1", "no-clothes": "1"}
    req = RenderRequest.from_params(1, "pfp", "7", query)
    assert req.cache_key("/s1/pfp/7") == "/s1/pfp/7_bg_color_elite_pfp_crop_no_bg_santa_snowball_female_nc"


def test_preview_ignores_background_options():
    req = RenderRequest.from_params(1, "pfp", "7", {"crop_preview": "1", "bg-color": "elite", "no-bg": "1"})
    assert req.flags.background_override_color is None
    assert req.cache_key("/s1/pfp/7") == "/s1/pfp/7_crop_preview"


def test_cache_roundtrip(tmp_path):
    cache = ImageCache(tmp_path)
    assert cache.get("/s1/600x600/1") is None
    cache.put("/s1/600x600/1_santa", b"png")
    assert cache.get("/s1/600x600/1_santa") == b"png"
    assert (tmp_path / "s1" / "600x600" / "1_santa.png").is_file()


def test_disabled_cache(tmp_path):
    cache = ImageCache(tmp_path, enabled=False)
    cache.put("/s1/1x1/1", b"png")
    assert cache.get("/s1/1x1/1") is None
    assert not any(tmp_path.iterdir())


def test_cache_rejects_escape(tmp_path):
    cache = ImageCache(tmp_path / "images")
    with pytest.raises(ValueError):
        cache.path_for("/../../etc/passwd")
