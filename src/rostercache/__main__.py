"""Run the service: ``python -m rostercache``."""

import uvicorn

from rostercache.api.app import create_app
from rostercache.config import AppConfig, configure_logging


def main() -> None:
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
