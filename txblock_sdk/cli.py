# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .applogging import init_logging
from .commands import command_encodings, get_transaction_command_type
from .config import DEFAULT_LOG_LEVEL
from .errors import TransactionBlockError
from .transaction_block import TransactionBlock

logger = logging.getLogger(__name__)


def load_block(path: str) -> TransactionBlock:
    with open(path) as f:
        data = json.load(f)
    logger.info("loaded transaction block from %s", path)
    return TransactionBlock.from_dict(data)


def inspect_block(block: TransactionBlock) -> List[str]:
    lines = []
    for index, command in enumerate(block.commands):
        lines.append(f"{index}: {get_transaction_command_type(command).__name__}")
        for field, position, argument, encoding in command_encodings(command):
            slot = field if position is None else f"{field}[{position}]"
            hint = "unresolved" if encoding is None else json.dumps(encoding.to_dict())
            lines.append(f"    {slot} = {argument} -> {hint}")
    return lines


def main(args: List[str]) -> int:
    parser = argparse.ArgumentParser(description="Transaction block inspector")
    parser.add_argument(
        "command", type=str, help="The command to execute", choices=["inspect", "validate"]
    )
    parser.add_argument("path", help="A JSON encoded transaction block", type=str)
    parser.add_argument(
        "--no-references",
        help="Only check the shape of each command, not where its arguments point",
        action="store_true",
    )
    parser.add_argument(
        "--log-level",
        help="One of DEBUG, INFO, WARNING or ERROR",
        type=str,
        default=DEFAULT_LOG_LEVEL,
    )
    parsed_args = parser.parse_args(args)

    level = getattr(logging, parsed_args.log_level.upper(), logging.WARNING)
    init_logging(logging.getLogger(""), level)

    try:
        block = load_block(parsed_args.path)
        if parsed_args.command == "inspect":
            for line in inspect_block(block):
                print(line)
        elif parsed_args.command == "validate":
            block.validate(check_references=not parsed_args.no_references)
            print(f"ok: {len(block.commands)} commands, {len(block.inputs)} inputs")
    except (TransactionBlockError, OSError, json.JSONDecodeError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


def run(argv: Optional[List[str]] = None):
    sys.exit(main(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
    run()
