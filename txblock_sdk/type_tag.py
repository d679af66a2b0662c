# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Move type tags, and the parser that turns a textual type such as
`0x2::coin::Coin<0x2::sui::SUI>` into a validated `TypeTag`.

Commands treat type tags as opaque values. Nothing outside this module looks inside one.
"""

from __future__ import annotations

import re
import typing
from typing import List

from typing_extensions import Protocol

from .account_address import AccountAddress, ParseAddressError
from .bcs import BcsError, Deserializer, Serializer
from .errors import InvalidTypeTag

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TOKEN = re.compile(r"\s*(::|<|>|,|[A-Za-z0-9_]+)")


class TypeTag:
    """TypeTag represents a type in Move."""

    BOOL: int = 0
    U8: int = 1
    U64: int = 2
    U128: int = 3
    ACCOUNT_ADDRESS: int = 4
    SIGNER: int = 5
    VECTOR: int = 6
    STRUCT: int = 7
    U16: int = 8
    U32: int = 9
    U256: int = 10

    value: typing.Any

    def __init__(self, value: typing.Any):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeTag):
            return NotImplemented
        return (
            self.value.variant() == other.value.variant() and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self):
        return self.value.__str__()

    def __repr__(self):
        return f"TypeTag({self})"

    def variant(self) -> int:
        return self.value.variant()

    @staticmethod
    def from_str(type_tag: str, strict: bool = True) -> TypeTag:
        return TypeTagParser().parse(type_tag, strict)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> TypeTag:
        variant = deserializer.uleb128()
        if variant in PrimitiveTag.NAMES:
            return TypeTag(PrimitiveTag(variant))
        elif variant == TypeTag.VECTOR:
            return TypeTag(VectorTag.deserialize(deserializer))
        elif variant == TypeTag.STRUCT:
            return TypeTag(StructTag.deserialize(deserializer))
        raise BcsError(f"Invalid TypeTag variant {variant}")

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.value.variant())
        serializer.struct(self.value)


class PrimitiveTag:
    """A type without parameters: bool, the unsigned integers, address and signer."""

    NAMES = {
        TypeTag.BOOL: "bool",
        TypeTag.U8: "u8",
        TypeTag.U16: "u16",
        TypeTag.U32: "u32",
        TypeTag.U64: "u64",
        TypeTag.U128: "u128",
        TypeTag.U256: "u256",
        TypeTag.ACCOUNT_ADDRESS: "address",
        TypeTag.SIGNER: "signer",
    }

    _variant: int

    def __init__(self, variant: int):
        if variant not in PrimitiveTag.NAMES:
            raise ValueError(f"Not a primitive type tag variant: {variant}")
        self._variant = variant

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrimitiveTag):
            return NotImplemented
        return self._variant == other._variant

    def __str__(self):
        return PrimitiveTag.NAMES[self._variant]

    def variant(self):
        return self._variant

    def serialize(self, serializer: Serializer):
        # The variant prefix written by TypeTag is the whole encoding.
        pass


PRIMITIVES = {name: variant for variant, name in PrimitiveTag.NAMES.items()}


class VectorTag:
    value: TypeTag

    def __init__(self, value: TypeTag):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorTag):
            return NotImplemented
        return self.value == other.value

    def __str__(self):
        return f"vector<{self.value}>"

    def variant(self):
        return TypeTag.VECTOR

    @staticmethod
    def deserialize(deserializer: Deserializer) -> VectorTag:
        return VectorTag(TypeTag.deserialize(deserializer))

    def serialize(self, serializer: Serializer):
        serializer.struct(self.value)


class StructTag:
    address: AccountAddress
    module: str
    name: str
    type_args: List[TypeTag]

    def __init__(self, address, module, name, type_args):
        self.address = address
        self.module = module
        self.name = name
        self.type_args = type_args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructTag):
            return NotImplemented
        return (
            self.address == other.address
            and self.module == other.module
            and self.name == other.name
            and self.type_args == other.type_args
        )

    def __str__(self) -> str:
        value = f"{self.address}::{self.module}::{self.name}"
        if len(self.type_args) > 0:
            value += f"<{', '.join(str(type_arg) for type_arg in self.type_args)}>"
        return value

    @staticmethod
    def from_str(type_tag: str, strict: bool = True) -> StructTag:
        tag = TypeTagParser().parse(type_tag, strict)
        if not isinstance(tag.value, StructTag):
            raise InvalidTypeTag(type_tag, "not a struct type")
        return tag.value

    def variant(self):
        return TypeTag.STRUCT

    @staticmethod
    def deserialize(deserializer: Deserializer) -> StructTag:
        address = deserializer.struct(AccountAddress)
        module = deserializer.str()
        name = deserializer.str()
        type_args = deserializer.sequence(TypeTag.deserialize)
        return StructTag(address, module, name, type_args)

    def serialize(self, serializer: Serializer):
        self.address.serialize(serializer)
        serializer.str(self.module)
        serializer.str(self.name)
        serializer.sequence(self.type_args, Serializer.struct)


class TypeTagAdapter(Protocol):
    """Anything able to turn a type string into a validated TypeTag."""

    def parse(self, text: str, strict: bool) -> TypeTag:
        ...


class TypeTagParser:
    """
    Recursive descent parser for Move type strings.

    In strict mode struct addresses must carry the 0x prefix. Relaxed mode also accepts
    bare hex addresses. Both modes reject anything outside the type grammar rather than
    guessing.
    """

    def parse(self, text: str, strict: bool = True) -> TypeTag:
        if not isinstance(text, str):
            raise InvalidTypeTag(repr(text), "type tags must be given as strings")
        tokens = self._tokenize(text)
        tag, position = self._parse_type(text, tokens, 0, strict)
        if position != len(tokens):
            raise InvalidTypeTag(text, f"unexpected trailing '{tokens[position]}'")
        return tag

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        tokens = []
        position = 0
        stripped = text.rstrip()
        while position < len(stripped):
            match = TOKEN.match(stripped, position)
            if match is None:
                raise InvalidTypeTag(text, f"unexpected character at {position}")
            tokens.append(match.group(1))
            position = match.end()
        if len(tokens) == 0:
            raise InvalidTypeTag(text, "empty type")
        return tokens

    def _parse_type(
        self, text: str, tokens: List[str], position: int, strict: bool
    ) -> typing.Tuple[TypeTag, int]:
        if position >= len(tokens):
            raise InvalidTypeTag(text, "unexpected end of type")
        token = tokens[position]

        if token in PRIMITIVES:
            return TypeTag(PrimitiveTag(PRIMITIVES[token])), position + 1

        if token == "vector":
            position = self._expect(text, tokens, position + 1, "<")
            inner, position = self._parse_type(text, tokens, position, strict)
            position = self._expect(text, tokens, position, ">")
            return TypeTag(VectorTag(inner)), position

        return self._parse_struct(text, tokens, position, strict)

    def _parse_struct(
        self, text: str, tokens: List[str], position: int, strict: bool
    ) -> typing.Tuple[TypeTag, int]:
        try:
            if strict:
                address = AccountAddress.from_str(tokens[position])
            else:
                address = AccountAddress.from_str_relaxed(tokens[position])
        except ParseAddressError as e:
            raise InvalidTypeTag(text, str(e)) from e

        position = self._expect(text, tokens, position + 1, "::")
        module, position = self._identifier(text, tokens, position)
        position = self._expect(text, tokens, position, "::")
        name, position = self._identifier(text, tokens, position)

        type_args: List[TypeTag] = []
        if position < len(tokens) and tokens[position] == "<":
            position += 1
            while True:
                type_arg, position = self._parse_type(text, tokens, position, strict)
                type_args.append(type_arg)
                if position < len(tokens) and tokens[position] == ",":
                    position += 1
                    continue
                position = self._expect(text, tokens, position, ">")
                break

        return TypeTag(StructTag(address, module, name, type_args)), position

    @staticmethod
    def _identifier(
        text: str, tokens: List[str], position: int
    ) -> typing.Tuple[str, int]:
        if position >= len(tokens) or not IDENTIFIER.match(tokens[position]):
            found = tokens[position] if position < len(tokens) else "end of type"
            raise InvalidTypeTag(text, f"expected an identifier, found '{found}'")
        return tokens[position], position + 1

    @staticmethod
    def _expect(text: str, tokens: List[str], position: int, expected: str) -> int:
        if position >= len(tokens) or tokens[position] != expected:
            found = tokens[position] if position < len(tokens) else "end of type"
            raise InvalidTypeTag(text, f"expected '{expected}', found '{found}'")
        return position + 1
