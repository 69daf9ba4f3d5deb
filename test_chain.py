"""tokenURI 조회 테스트 — ABI 인코딩/디코딩과 컨트랙트 fallback."""

import logging

import pytest

from content.chain import TokenURIError, decode_abi_string, encode_token_uri_call, resolve_token_uri


def abi_string(text: str) -> str:
    data = text.encode()
    padded = data + b"\x00" * (-len(data) % 32)
    return "0x" + (32).to_bytes(32, "big").hex() + len(data).to_bytes(32, "big").hex() + padded.hex()


class FakeClient:
    def __init__(self, uris: dict):
        self._uris = uris
        self.calls = []

    async def token_uri(self, contract: str, token_id: int) -> str:
        self.calls.append(contract)
        if contract not in self._uris:
            raise TokenURIError("execution reverted")
        return self._uris[contract]


def test_encode_call():
    data = encode_token_uri_call(255)
    assert data.startswith("0xc87b56dd")
    assert len(data) == 2 + 8 + 64
    assert data.endswith("ff")


def test_encode_rejects_negative():
    with pytest.raises(TokenURIError):
        encode_token_uri_call(-1)


def test_decode_string():
    uri = "data:application/json;base64," + "A" * 70
    assert decode_abi_string(abi_string(uri)) == uri
    assert decode_abi_string(abi_string("")) == ""


def test_decode_empty_result():
    with pytest.raises(TokenURIError):
        decode_abi_string("0x")


def test_decode_bad_length():
    broken = "0x" + (32).to_bytes(32, "big").hex() + (500).to_bytes(32, "big").hex()
    with pytest.raises(TokenURIError):
        decode_abi_string(broken)


async def test_current_contract_first():
    client = FakeClient({"0xnew": "new", "0xold": "old"})
    assert await resolve_token_uri(client, {"current": "0xnew", "legacy": "0xold"}, 1) == "new"
    assert client.calls == ["0xnew"]


async def test_falls_back_to_legacy():
    client = FakeClient({"0xold": "old"})
    assert await resolve_token_uri(client, {"current": "0xnew", "legacy": "0xold"}, 1) == "old"
    assert client.calls == ["0xnew", "0xold"]


async def test_both_fail():
    with pytest.raises(TokenURIError):
        await resolve_token_uri(FakeClient({}), {"current": "0xnew", "legacy": "0xold"}, 1)
    with pytest.raises(TokenURIError):
        await resolve_token_uri(FakeClient({}), {}, 1)


async def test_failed_lookup_logged_as_error(caplog):
    client = FakeClient({"0xold": "old"})
    with caplog.at_level(logging.ERROR, logger="content.chain"):
        await resolve_token_uri(client, {"current": "0xnew", "legacy": "0xold"}, 1)
    assert [r.levelno for r in caplog.records] == [logging.ERROR]
    assert "0xnew" in caplog.records[0].getMessage()
