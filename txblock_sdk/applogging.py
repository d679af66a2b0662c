# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

# CLI logging.

import logging
import sys


def init_logging(
    logger: logging.Logger,
    level: int = logging.INFO,
    print_metadata: bool = True,
) -> None:
    """Initialize logging for the command line tools."""
    logger.setLevel(level)
    sh = logging.StreamHandler(sys.stderr)
    if print_metadata:
        sh.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s [%(filename)s.%(funcName)s:%(lineno)d] %(message)s",
                datefmt="%a, %d %b %Y %H:%M:%S",
            )
        )
    logger.addHandler(sh)
