import logging

import structlog

from app.logging import setup_logging


def test_root_logger_has_one_structlog_handler():
    setup_logging()

    handlers = logging.getLogger().handlers

    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
