# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from typing import Any


class TransactionBlockError(Exception):
    """
    Base class for every failure raised while building or validating a transaction block.
    """


class MalformedTarget(TransactionBlockError):
    """
    A move call target did not decompose into package, module and function.
    """

    target: str

    def __init__(self, target: str, separator: str = "::"):
        super().__init__(
            f"Invalid move call target '{target}', expected "
            f"package{separator}module{separator}function"
        )
        self.target = target


class InvalidTypeTag(TransactionBlockError, ValueError):
    """
    The type tag parser rejected a type string.
    """

    text: str

    def __init__(self, text: str, reason: str):
        super().__init__(f"Invalid type tag '{text}': {reason}")
        self.text = text


class InvalidCommand(TransactionBlockError):
    """
    A value matched none of the command shapes.
    """

    data: Any

    def __init__(self, data: Any, detail: str):
        super().__init__(f"Value is not a valid transaction command: {detail}")
        self.data = data


class SchemaMismatch(TransactionBlockError):
    """
    Untrusted data failed structural validation against an argument or block schema.
    """


class DanglingReference(TransactionBlockError):
    """
    An argument points at an input or command result that does not exist yet.
    """

    command_index: int
    argument: Any

    def __init__(self, command_index: int, argument: Any, detail: str):
        super().__init__(f"Command {command_index} references {argument}: {detail}")
        self.command_index = command_index
        self.argument = argument


class EncodingConflict(TransactionBlockError):
    """
    The same input is used both as an object and as a pure value, or as two pure types.
    """


class UnsupportedPureType(TransactionBlockError):
    """
    No pure encoding is known for the requested primitive type name.
    """


class LimitExceeded(TransactionBlockError):
    """
    A transaction block grew past one of the configured limits.
    """
