"""메인 — 시민 이미지 렌더링 HTTP 서버 실행."""

import logging

from aiohttp import web

from config import load_config
from server.app import build_service, create_app

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(message)s")
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def main():
    config = load_config()
    app = create_app(build_service(config))

    host = config["server"].get("host", "0.0.0.0")
    port = int(config["server"].get("port", 8080))
    logging.info("서버 시작: %s:%d", host, port)
    web.run_app(app, host=host, port=port, print=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logging.info("종료")
