# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Encoding metadata for command arguments.

An argument only says where a value comes from, never what type it has, so the way a
resolved value is serialized has to come from the slot it occupies. Each command field
declares that through its annotation: `ObjectArgument` for slots that must resolve to an
object reference, `PureArgument(type)` for slots that must resolve to a pure value of a
known primitive type. This module holds the metadata records, looks them up on a schema,
and encodes pure values once the serializer knows what to do.
"""

from __future__ import annotations

import logging
import re
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from typing_extensions import Annotated, get_args, get_origin

from .account_address import AccountAddress, ParseAddressError
from .bcs import BcsError, Serializer
from .errors import SchemaMismatch, UnsupportedPureType

logger = logging.getLogger(__name__)

VECTOR_TYPE = re.compile(r"^vector<(.+)>$")

OBJECT = "object"
PURE = "pure"


@dataclass(frozen=True)
class WellKnownEncoding:
    kind: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class ObjectEncoding(WellKnownEncoding):
    """The value resolves to an on-chain object and goes through the object reference path."""

    kind: str = field(default=OBJECT, init=False)


@dataclass(frozen=True)
class PureEncoding(WellKnownEncoding):
    """The value is encoded directly as the named primitive type, e.g. u64 or address."""

    kind: str = field(default=PURE, init=False)
    type: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "type": self.type}


def get_encoding(schema: Any) -> Optional[WellKnownEncoding]:
    """Returns the encoding declared directly on an annotated schema, if any."""
    if get_origin(schema) is Annotated:
        for metadata in reversed(get_args(schema)[1:]):
            if isinstance(metadata, WellKnownEncoding):
                return metadata
    return None


def element_encoding(schema: Any) -> Optional[WellKnownEncoding]:
    """Like `get_encoding`, but looks through list and tuple annotations to their elements."""
    encoding = get_encoding(schema)
    if encoding is not None:
        return encoding

    if get_origin(schema) in (list, tuple, get_origin(typing.Sequence)):
        args = get_args(schema)
        if len(args) > 0:
            return element_encoding(args[0])
    return None


def field_encoding(model: Any, field_name: str) -> Optional[WellKnownEncoding]:
    """
    Returns the encoding declared for a field of a command model. Unconstrained fields,
    such as the arguments of a move call, return None and leave the decision to the
    function's ABI.
    """
    model_field = model.model_fields[field_name]
    for metadata in reversed(model_field.metadata):
        if isinstance(metadata, WellKnownEncoding):
            return metadata
    return element_encoding(model_field.annotation)


def _encode_address(serializer: Serializer, value: Any):
    if isinstance(value, str):
        try:
            value = AccountAddress.from_str(value)
        except ParseAddressError as e:
            raise BcsError(f"Cannot encode {value!r} into address: {e}") from e
    if not isinstance(value, AccountAddress):
        raise BcsError(f"Cannot encode {value!r} into address")
    serializer.struct(value)


def _encode_string(serializer: Serializer, value: Any):
    if not isinstance(value, str):
        raise BcsError(f"Cannot encode {value!r} into string")
    serializer.str(value)


PRIMITIVE_ENCODERS: Dict[str, Callable[[Serializer, Any], None]] = {
    "bool": Serializer.bool,
    "u8": Serializer.u8,
    "u16": Serializer.u16,
    "u32": Serializer.u32,
    "u64": Serializer.u64,
    "u128": Serializer.u128,
    "u256": Serializer.u256,
    "address": _encode_address,
    "string": _encode_string,
}


def pure_encoder(type_name: str) -> Callable[[Serializer, Any], None]:
    """Returns a BCS encoder for a primitive type name or a vector of one."""
    if type_name in PRIMITIVE_ENCODERS:
        return PRIMITIVE_ENCODERS[type_name]

    match = VECTOR_TYPE.match(type_name)
    if match is None:
        raise UnsupportedPureType(f"No pure encoding for type '{type_name}'")

    inner = match.group(1)
    element = pure_encoder(inner)
    if inner == "u8":

        def encode_bytes(serializer: Serializer, value: Any):
            if isinstance(value, (bytes, bytearray)):
                serializer.to_bytes(bytes(value))
            else:
                serializer.sequence(value, element)

        return encode_bytes
    return Serializer.sequence_serializer(element)


def encode_pure(type_name: str, value: Any) -> bytes:
    ser = Serializer()
    pure_encoder(type_name)(ser, value)
    logger.debug("encoded pure %s value into %d bytes", type_name, len(ser.output()))
    return ser.output()


def encode_with(encoding: WellKnownEncoding, value: Any) -> bytes:
    """Encodes a resolved pure value per its declared encoding."""
    if not isinstance(encoding, PureEncoding):
        raise UnsupportedPureType(
            f"{encoding.kind} arguments are encoded as object references, not pure bytes"
        )
    return encode_pure(encoding.type, value)


ABI_PRIMITIVES = {
    "Bool": "bool",
    "U8": "u8",
    "U16": "u16",
    "U32": "u32",
    "U64": "u64",
    "U128": "u128",
    "U256": "u256",
    "Address": "address",
}

# Struct types the execution layer accepts as pure bytes.
PURE_STRUCTS = {
    ("0x1", "string", "String"): "string",
    ("0x1", "ascii", "String"): "string",
    ("0x2", "object", "ID"): "address",
}

TX_CONTEXT = ("0x2", "tx_context", "TxContext")


def _struct_key(struct: Dict[str, Any]) -> typing.Tuple[str, str, str]:
    try:
        address = AccountAddress.from_str_relaxed(struct["address"]).short_str()
        return (address, struct["module"], struct["name"])
    except (KeyError, TypeError, ParseAddressError) as e:
        raise SchemaMismatch(f"Invalid struct in ABI type {struct!r}: {e}") from e


def _pure_type_name(abi_type: Any) -> Optional[str]:
    if isinstance(abi_type, str):
        return ABI_PRIMITIVES.get(abi_type)
    if isinstance(abi_type, dict) and "Vector" in abi_type:
        inner = _pure_type_name(abi_type["Vector"])
        return None if inner is None else f"vector<{inner}>"
    if isinstance(abi_type, dict) and "Struct" in abi_type:
        return PURE_STRUCTS.get(_struct_key(abi_type["Struct"]))
    return None


def resolve_encoding(abi_type: Any) -> Optional[WellKnownEncoding]:
    """
    Maps a normalized Move parameter type, as reported by an execution layer's ABI, to an
    encoding. Returns None for the transaction context parameter, which callers never
    supply.
    """
    if isinstance(abi_type, dict):
        reference = abi_type.get("Reference", abi_type.get("MutableReference"))
        if reference == "Signer":
            raise UnsupportedPureType("signer parameters cannot be passed as arguments")
        if reference is not None:
            if (
                isinstance(reference, dict)
                and "Struct" in reference
                and _struct_key(reference["Struct"]) == TX_CONTEXT
            ):
                return None
            return ObjectEncoding()

    type_name = _pure_type_name(abi_type)
    if type_name is not None:
        return PureEncoding(type=type_name)

    if abi_type == "Signer":
        raise UnsupportedPureType("signer parameters cannot be passed as arguments")
    return ObjectEncoding()
