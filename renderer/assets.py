"""정적 오버레이 에셋 모듈 — 시즌 모자, 빈 주먹, 눈덩이.

서비스 시작 시 한 번 로드하고 이후에는 읽기만 한다.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

HAT_FILE = "santa_hat.png"
FIST_FILE = "empty_fist.png"
SNOWBALL_FILE = "emptyhand_snowball.png"


@dataclass(frozen=True)
class OverlayAssets:
    """오버레이 이미지 묶음. 없는 에셋은 None이고 해당 기능만 건너뛴다."""
    hat: Image.Image | None = None
    fist: Image.Image | None = None
    snowball: Image.Image | None = None

    def snowball_fist(self) -> Image.Image | None:
        """빈 주먹 위에 눈덩이를 (0, 0) 기준으로 합성한 새 이미지를 반환한다.

        원본 에셋은 건드리지 않는다. 주먹이 없으면 None, 눈덩이만 없으면 빈 주먹.
        """
        if self.fist is None:
            return None
        fist = self.fist.convert("RGBA")
        if self.snowball is not None:
            snowball = self.snowball.convert("RGBA").crop((0, 0) + fist.size)
            fist.alpha_composite(snowball)
        return fist


def _load(path: Path) -> Image.Image | None:
    if not path.exists():
        logger.warning("오버레이 에셋 없음: %s", path)
        return None
    try:
        with Image.open(path) as img:
            loaded = img.convert("RGBA")
        logger.info("오버레이 에셋 로드: %s", path.name)
        return loaded
    except (Image.DecompressionBombError, OSError) as e:
        logger.warning("오버레이 에셋 로드 실패: %s (%s)", path.name, e)
        return None


def load_assets(asset_dir: str | Path = "assets") -> OverlayAssets:
    """에셋 디렉토리에서 오버레이 이미지를 읽는다."""
    asset_dir = Path(asset_dir)
    return OverlayAssets(
        hat=_load(asset_dir / HAT_FILE),
        fist=_load(asset_dir / FIST_FILE),
        snowball=_load(asset_dir / SNOWBALL_FILE),
    )
