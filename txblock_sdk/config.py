# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import os

# Upper bounds enforced by the execution layer for a single programmable block.
MAX_PROGRAMMABLE_TX_COMMANDS = 1024
MAX_INPUT_OBJECTS = 2048

# Consulted by the CLI when no --log-level flag is given.
DEFAULT_LOG_LEVEL = os.getenv("TXBLOCK_LOG_LEVEL", "WARNING")


class BuilderConfig:
    """Common configuration for assembling and validating transaction blocks"""

    target_separator: str = "::"
    strict_type_tags: bool = True
    max_commands: int = MAX_PROGRAMMABLE_TX_COMMANDS
    max_inputs: int = MAX_INPUT_OBJECTS
    check_references: bool = True

    def __init__(self, **overrides):
        for name, value in overrides.items():
            if not hasattr(BuilderConfig, name):
                raise TypeError(f"Unknown BuilderConfig option: {name}")
            setattr(self, name, value)
