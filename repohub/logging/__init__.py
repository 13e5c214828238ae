import logging
import os
import sys

import structlog

_level = logging.getLevelName(os.getenv("LOGLEVEL", "INFO").upper())
if not isinstance(_level, int):
    _level = logging.INFO

# built-in logger only renders the message, structlog does the formatting
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=_level,
)

# quiet the libraries that log every query or http call
for module in [
    "globus_sdk",
    "urllib3",
    "uvicorn",
    "botocore",
    "boto3",
    "sqlalchemy.engine",
    "asyncpg",
    "markdown_it",
]:
    logging.getLogger(module).setLevel(logging.WARNING)

# see: https://www.structlog.org/en/stable/standard-library.html
structlog.configure(
    processors=[
        # request-scoped context (request_id, username) bound by the middleware
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FUNC_NAME,
            }
        ),
        # render exc_info into the "exception" key
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.LogfmtRenderer(
            sort_keys=True,
            key_order=["event", "level", "status_code"],
            bool_as_flag=False,
            drop_missing=True,
        ),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)
