import logging

import uvicorn

import config
from utils.logging_setup import setup_logging


logger = logging.getLogger("start_server")


def main() -> int:
    setup_logging(config.LOG_LEVEL)
    logger.info("Serving tasks on http://%s:%s", config.HOST, config.PORT)
    uvicorn.run(
        "api.app:app",
        host=config.HOST,
        port=config.PORT,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
