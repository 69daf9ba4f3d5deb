"""렌더링 결과 디스크 캐시 모듈."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class ImageCache:
    """캐시 키 (요청 경로 + 옵션 접미사) 별 PNG 파일 캐시."""

    def __init__(self, directory: str | Path = "images/", enabled: bool = True):
        self._root = Path(directory).resolve()
        self._enabled = enabled

    def path_for(self, key: str) -> Path:
        """키에 해당하는 파일 경로. 캐시 루트 밖을 가리키면 ValueError."""
        path = (self._root / (key.strip("/") + ".png")).resolve()
        if not path.is_relative_to(self._root):
            raise ValueError(f"캐시 경로가 루트를 벗어남: {key}")
        return path

    def get(self, key: str) -> bytes | None:
        if not self._enabled:
            return None
        path = self.path_for(key)
        if not path.is_file():
            return None
        logger.debug("캐시 적중: %s", key)
        return path.read_bytes()

    def put(self, key: str, png: bytes) -> None:
        """PNG 바이트를 저장한다. 임시 파일에 쓴 뒤 교체하므로 동시 요청에도 안전하다."""
        if not self._enabled:
            return
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.{os.getpid()}.{id(png)}.tmp")
        tmp.write_bytes(png)
        os.replace(tmp, path)
        logger.info("캐시 저장: %s (%d 바이트)", key, len(png))
