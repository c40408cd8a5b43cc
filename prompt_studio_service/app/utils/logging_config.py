# prompt_studio_service/app/utils/logging_config.py
import logging
import os
import sys


def setup_logging():
    """
    Configures basic logging for the service.
    Logs to stdout so the container runtime can collect them.
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request at INFO, which drowns out routing decisions.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Prompt Studio logging configured with level: {log_level_str}")
