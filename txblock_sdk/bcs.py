# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
A small BCS serializer and deserializer, the binary layout used for transaction blocks
on Move chains. Learn more at https://github.com/diem/bcs
"""

from __future__ import annotations

import io
import typing

MAX_U8 = 2**8 - 1
MAX_U16 = 2**16 - 1
MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1
MAX_U128 = 2**128 - 1
MAX_U256 = 2**256 - 1


class BcsError(Exception):
    """
    Raised when a value cannot be encoded, or input bytes cannot be decoded.
    """


class Deserializer:
    _input: io.BytesIO
    _length: int

    def __init__(self, data: bytes):
        self._length = len(data)
        self._input = io.BytesIO(data)

    def remaining(self) -> int:
        return self._length - self._input.tell()

    def bool(self) -> bool:
        value = int.from_bytes(self._read(1), byteorder="little", signed=False)
        if value == 0:
            return False
        elif value == 1:
            return True
        else:
            raise BcsError(f"Unexpected boolean value: {value}")

    def to_bytes(self) -> bytes:
        return self._read(self.uleb128())

    def fixed_bytes(self, length: int) -> bytes:
        return self._read(length)

    def option(
        self, value_decoder: typing.Callable[[Deserializer], typing.Any]
    ) -> typing.Optional[typing.Any]:
        if self.bool():
            return value_decoder(self)
        return None

    def sequence(
        self,
        value_decoder: typing.Callable[[Deserializer], typing.Any],
    ) -> typing.List[typing.Any]:
        length = self.uleb128()
        values: typing.List[typing.Any] = []
        while len(values) < length:
            values.append(value_decoder(self))
        return values

    def str(self) -> str:
        return self.to_bytes().decode()

    def struct(self, struct: typing.Any) -> typing.Any:
        return struct.deserialize(self)

    def u8(self) -> int:
        return self._read_int(1)

    def u16(self) -> int:
        return self._read_int(2)

    def u32(self) -> int:
        return self._read_int(4)

    def u64(self) -> int:
        return self._read_int(8)

    def u128(self) -> int:
        return self._read_int(16)

    def u256(self) -> int:
        return self._read_int(32)

    def uleb128(self) -> int:
        value = 0
        shift = 0

        while value <= MAX_U32:
            byte = self._read_int(1)
            value |= (byte & 0x7F) << shift
            if byte & 0x80 == 0:
                break
            shift += 7

        if value > MAX_U32:
            raise BcsError("Unexpectedly large uleb128 value")

        return value

    def _read(self, length: int) -> bytes:
        value = self._input.read(length)
        if value is None or len(value) < length:
            actual_length = 0 if value is None else len(value)
            error = (
                f"Unexpected end of input. Requested: {length}, found: {actual_length}"
            )
            raise BcsError(error)
        return value

    def _read_int(self, length: int) -> int:
        return int.from_bytes(self._read(length), byteorder="little", signed=False)


class Serializer:
    _output: io.BytesIO

    def __init__(self):
        self._output = io.BytesIO()

    def output(self) -> bytes:
        return self._output.getvalue()

    def bool(self, value: bool):
        if not isinstance(value, bool):
            raise BcsError(f"Cannot encode {value!r} into bool")
        self._write_int(int(value), 1)

    def to_bytes(self, value: bytes):
        self.uleb128(len(value))
        self._output.write(value)

    def fixed_bytes(self, value: bytes):
        self._output.write(value)

    def option(
        self,
        value: typing.Optional[typing.Any],
        value_encoder: typing.Callable[[Serializer, typing.Any], None],
    ):
        if value is None:
            self.bool(False)
        else:
            self.bool(True)
            value_encoder(self, value)

    @staticmethod
    def sequence_serializer(
        value_encoder: typing.Callable[[Serializer, typing.Any], None],
    ):
        return lambda self, values: self.sequence(values, value_encoder)

    def sequence(
        self,
        values: typing.Sequence[typing.Any],
        value_encoder: typing.Callable[[Serializer, typing.Any], None],
    ):
        self.uleb128(len(values))
        for value in values:
            self.fixed_bytes(encoder(value, value_encoder))

    def str(self, value: str):
        self.to_bytes(value.encode())

    def struct(self, value: typing.Any):
        value.serialize(self)

    def u8(self, value: int):
        self._write_uint(value, MAX_U8, 1, "u8")

    def u16(self, value: int):
        self._write_uint(value, MAX_U16, 2, "u16")

    def u32(self, value: int):
        self._write_uint(value, MAX_U32, 4, "u32")

    def u64(self, value: int):
        self._write_uint(value, MAX_U64, 8, "u64")

    def u128(self, value: int):
        self._write_uint(value, MAX_U128, 16, "u128")

    def u256(self, value: int):
        self._write_uint(value, MAX_U256, 32, "u256")

    def uleb128(self, value: int):
        if value < 0 or value > MAX_U32:
            raise BcsError(f"Cannot encode {value} into uleb128")

        while value >= 0x80:
            # Write 7 (lowest) bits of data and set the 8th bit to 1.
            byte = value & 0x7F
            self.u8(byte | 0x80)
            value >>= 7

        # Write the remaining bits of data and set the highest bit to 0.
        self.u8(value & 0x7F)

    def _write_uint(self, value: int, maximum: int, length: int, name: str):
        if isinstance(value, bool) or not isinstance(value, int):
            raise BcsError(f"Cannot encode {value!r} into {name}")
        if value < 0 or value > maximum:
            raise BcsError(f"Cannot encode {value} into {name}")

        self._write_int(value, length)

    def _write_int(self, value: int, length: int):
        self._output.write(value.to_bytes(length, "little", signed=False))


def encoder(
    value: typing.Any, encoder: typing.Callable[[Serializer, typing.Any], None]
) -> bytes:
    ser = Serializer()
    encoder(ser, value)
    return ser.output()
