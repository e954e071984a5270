"""
Logging helpers.

Modules log through ``logging.getLogger(__name__)``, so every record lands in
the ``statgraph`` logger hierarchy. `get_logger` additionally makes sure the
package logger has one stream handler and takes its level from the
``STATGRAPH_LOG_LEVEL`` environment variable (default ``WARNING``).
"""

import logging
import os

PACKAGE_LOGGER = "statgraph"
LEVEL_ENV_VAR = "STATGRAPH_LOG_LEVEL"

_FORMAT = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s"


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Return a logger inside the package hierarchy, configuring the root of it once.

    Parameters
    ----------
    name : str
        Dotted logger name, usually ``__name__`` of the calling module.

    Returns
    -------
    logging.Logger
        The requested logger.
    """
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.propagate = False

    level_name = os.getenv(LEVEL_ENV_VAR, "WARNING").upper()
    root.setLevel(getattr(logging, level_name, logging.WARNING))

    return logging.getLogger(name)
