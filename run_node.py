import logging

import uvicorn

from gatedao.config import load_config
from gatedao.logger import configure_logging

# Keep uvicorn's own loggers quiet; requests are logged by the node middleware
uvicorn_loggers = [
    logging.getLogger("uvicorn"),
    logging.getLogger("uvicorn.error"),
    logging.getLogger("uvicorn.access"),
    logging.getLogger("uvicorn.asgi"),
]

for uvicorn_logger in uvicorn_loggers:
    uvicorn_logger.setLevel(logging.ERROR)
    uvicorn_logger.handlers = []

# Environment variables win over config.toml, which wins over .env defaults
config = load_config()
configure_logging(config.node.log_level)

if __name__ == "__main__":
    uvicorn.run(
        "gatedao.node.main:create_app",
        factory=True,
        host=config.node.host,
        port=config.node.port,
        reload=False,
        access_log=False,
        log_config=None,
    )
