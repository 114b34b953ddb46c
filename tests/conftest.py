import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    for name in ("httpeek", "httpx"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
