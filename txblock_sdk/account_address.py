# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import string

from .bcs import Deserializer, Serializer

HEX_DIGITS = frozenset(string.hexdigits)


class ParseAddressError(Exception):
    """
    There was an error parsing an address.
    """


class AccountAddress:
    """
    A 32 byte account or object identifier. Packages, accounts and objects share the
    same address space, so this is also the type of a move call's package.
    """

    address: bytes
    LENGTH: int = 32

    def __init__(self, address: bytes):
        self.address = address

        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError("Expected address of length 32")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self):
        """
        Addresses are always rendered in LONG form, 0x followed by 64 lowercase hex
        characters, so that two spellings of the same address compare equal as text.
        """
        return f"0x{self.address.hex()}"

    def __repr__(self):
        return self.__str__()

    def short_str(self) -> str:
        """The address without leading zeroes, e.g. 0x2 for the framework package."""
        return "0x" + (self.address.hex().lstrip("0") or "0")

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """
        NOTE: This function has strict parsing behavior. For relaxed behavior, please use
        the `from_str_relaxed` function.

        Accepts 0x followed by 1 to 64 hex characters. Short forms are left padded with
        zeroes, so 0x2 and 0x000...002 are the same address.
        """
        if not address.startswith("0x"):
            raise ParseAddressError("Hex string must start with a leading 0x.")

        return AccountAddress.from_str_relaxed(address)

    @staticmethod
    def from_str_relaxed(address: str) -> AccountAddress:
        """
        NOTE: This function has relaxed parsing behavior. Where possible, use `from_str`.

        Same as `from_str`, except the leading 0x is optional.
        """
        addr = address

        # Strip 0x prefix if present.
        if address[0:2] == "0x":
            addr = address[2:]

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) > AccountAddress.LENGTH * 2:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if not all(char in HEX_DIGITS for char in addr):
            raise ParseAddressError(f"Hex string contains non hex characters: {address}")

        if len(addr) < AccountAddress.LENGTH * 2:
            pad = "0" * (AccountAddress.LENGTH * 2 - len(addr))
            addr = pad + addr

        return AccountAddress(bytes.fromhex(addr))

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AccountAddress:
        return AccountAddress(deserializer.fixed_bytes(AccountAddress.LENGTH))

    def serialize(self, serializer: Serializer):
        serializer.fixed_bytes(self.address)
