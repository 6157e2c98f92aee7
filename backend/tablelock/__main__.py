import argparse
import logging

import uvicorn

from tablelock import config

logger = logging.getLogger("tablelock")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="tablelock", description=config.SERVICE_NAME)
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("%s is running on port %d", config.SERVICE_NAME, args.port)
    logger.info("Health check available at: http://localhost:%d/health", args.port)
    logger.info("API documentation available at: http://localhost:%d/", args.port)

    uvicorn.run(
        "tablelock.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
