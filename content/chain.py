"""온체인 tokenURI 조회 모듈 — 이더리움 JSON-RPC eth_call."""

import logging

import aiohttp

logger = logging.getLogger(__name__)

# keccak256("tokenURI(uint256)")[:4]
TOKEN_URI_SELECTOR = "c87b56dd"


class TokenURIError(RuntimeError):
    """tokenURI 조회 실패."""


def encode_token_uri_call(token_id: int) -> str:
    """tokenURI(uint256) 호출 데이터."""
    if token_id < 0:
        raise TokenURIError(f"잘못된 토큰 ID: {token_id}")
    return "0x" + TOKEN_URI_SELECTOR + f"{token_id:064x}"


def decode_abi_string(result: str) -> str:
    """ABI 인코딩된 단일 string 반환값을 디코딩한다.

    구조: [오프셋(32B)] ... [길이(32B)] [데이터(패딩)]
    """
    data = bytes.fromhex(result[2:] if result.startswith("0x") else result)
    if len(data) < 64:
        raise TokenURIError("빈 반환값 (토큰 없음 또는 revert)")
    offset = int.from_bytes(data[:32], "big")
    if offset + 32 > len(data):
        raise TokenURIError("잘못된 ABI 오프셋")
    length = int.from_bytes(data[offset:offset + 32], "big")
    start = offset + 32
    if start + length > len(data):
        raise TokenURIError("잘못된 ABI 문자열 길이")
    return data[start:start + length].decode("utf-8")


class TokenURIClient:
    """JSON-RPC 엔드포인트에서 ERC-721 tokenURI를 가져온다."""

    def __init__(self, rpc_url: str, timeout_sec: float = 10):
        self._rpc_url = rpc_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self._request_id = 0

    async def token_uri(self, contract: str, token_id: int) -> str:
        """contract의 tokenURI(token_id)를 호출한다."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": "eth_call",
            "params": [
                {"to": contract, "data": encode_token_uri_call(token_id)},
                "latest",
            ],
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self._rpc_url, json=payload,
                                        timeout=self._timeout) as resp:
                    resp.raise_for_status()
                    result = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise TokenURIError(f"RPC 호출 실패: {e}") from e

        if "error" in result:
            error = result["error"]
            raise TokenURIError(f"RPC 오류: {error.get('code')} {error.get('message')}")
        return decode_abi_string(result.get("result") or "0x")


async def resolve_token_uri(client: TokenURIClient, contracts: dict, token_id: int) -> str:
    """현재 컨트랙트에서 먼저 찾고, 실패하면 legacy 컨트랙트로 재시도한다.

    contracts: {"current": 주소, "legacy": 주소} (둘 중 하나는 없어도 된다)
    """
    addresses = [contracts[k] for k in ("current", "legacy") if contracts.get(k)]
    if not addresses:
        raise TokenURIError("설정된 컨트랙트 없음")

    last_error: TokenURIError | None = None
    for address in addresses:
        try:
            return await client.token_uri(address, token_id)
        except TokenURIError as e:
            logger.error("tokenURI 조회 실패 (%s #%d): %s", address, token_id, e)
            last_error = e
    raise last_error
