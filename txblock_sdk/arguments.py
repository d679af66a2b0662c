# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
The ways a command can refer to a value: a transaction input, the gas coin, or the
result of an earlier command in the same block.

Records are immutable pydantic models tagged by a literal `kind` field. Constructing one
in Python fills in `kind`; validating untyped data requires it. Unknown fields are
rejected everywhere.
"""

import typing
from typing import Any, ClassVar, Dict, Generic, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter
from pydantic import ValidationError, WrapSerializer
from typing_extensions import Annotated, Literal

from .bcs import BcsError, Deserializer, Serializer
from .encoding import ObjectEncoding, PureEncoding
from .errors import SchemaMismatch

T = TypeVar("T")

Index = Annotated[StrictInt, Field(ge=0)]


def _dump_as_list(value: Any, handler: Any) -> Any:
    return list(handler(value))


def FrozenList(item: Any) -> Any:
    """A tuple of items that accepts any sequence and goes on the wire as a list."""
    return Annotated[Tuple[item, ...], WrapSerializer(_dump_as_list)]


class WireModel(BaseModel):
    """Base for every record that crosses the wire as a plain dict."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    def __init__(self, **data: Any):
        kind = type(self).wire_kind()
        if kind is not None:
            data.setdefault("kind", kind)
        super().__init__(**data)

    @classmethod
    def wire_kind(cls) -> Optional[str]:
        kind = cls.model_fields.get("kind")
        if kind is None:
            return None
        return typing.get_args(kind.annotation)[0]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Input(WireModel):
    VARIANT: ClassVar[int] = 1

    kind: Literal["Input"]
    index: Index
    name: Optional[StrictStr] = None
    value: Any = None

    def __str__(self) -> str:
        return f"Input({self.index})"

    def wire_identity(self) -> typing.Tuple[str, int]:
        # name and value are debugging aids, two inputs with one index are the same input
        return (self.kind, self.index)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.u16(self.index)


class GasCoin(WireModel):
    VARIANT: ClassVar[int] = 0

    kind: Literal["GasCoin"]

    def __str__(self) -> str:
        return "GasCoin"

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)


class Result(WireModel):
    VARIANT: ClassVar[int] = 2

    kind: Literal["Result"]
    index: Index

    def __str__(self) -> str:
        return f"Result({self.index})"

    def nested(self, result_index: int) -> "NestedResult":
        return NestedResult(index=self.index, result_index=result_index)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.u16(self.index)


class NestedResult(WireModel):
    VARIANT: ClassVar[int] = 3

    kind: Literal["NestedResult"]
    index: Index
    result_index: Index = Field(alias="resultIndex")

    def __str__(self) -> str:
        return f"NestedResult({self.index}, {self.result_index})"

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.u16(self.index)
        serializer.u16(self.result_index)


ArgumentTypes = (Input, GasCoin, Result, NestedResult)

# Generic command argument, any of the four shapes and no encoding hint.
Argument = Annotated[
    Union[Input, GasCoin, Result, NestedResult], Field(discriminator="kind")
]

# Command argument referring to an object.
ObjectArgument = Annotated[Argument, ObjectEncoding()]


def PureArgument(type: str) -> Any:
    """Command argument referring to a pure value of the given primitive type."""
    return Annotated[Argument, PureEncoding(type=type)]


_argument_adapter: TypeAdapter = TypeAdapter(Argument)


def parse_argument(data: Any) -> Union[Input, GasCoin, Result, NestedResult]:
    try:
        return _argument_adapter.validate_python(data)
    except ValidationError as e:
        raise SchemaMismatch(f"Value is not a valid argument: {e}") from e


def is_argument(data: Any) -> bool:
    try:
        parse_argument(data)
    except SchemaMismatch:
        return False
    return True


def deserialize_argument(
    deserializer: Deserializer,
) -> Union[Input, GasCoin, Result, NestedResult]:
    variant = deserializer.uleb128()
    if variant == GasCoin.VARIANT:
        return GasCoin()
    elif variant == Input.VARIANT:
        return Input(index=deserializer.u16())
    elif variant == Result.VARIANT:
        return Result(index=deserializer.u16())
    elif variant == NestedResult.VARIANT:
        index = deserializer.u16()
        return NestedResult(index=index, result_index=deserializer.u16())
    raise BcsError(f"Invalid argument variant {variant}")


class NoneOption(WireModel):
    none: None = Field(alias="None")

    def __init__(self, **data: Any):
        if "none" not in data:
            data.setdefault("None", None)
        super().__init__(**data)

    def __str__(self) -> str:
        return "None"


class SomeOption(WireModel, Generic[T]):
    value: T = Field(alias="Some")

    def __str__(self) -> str:
        return f"Some({self.value})"


def Option(inner: Any) -> Any:
    """An explicit two armed option, `{"None": null}` or `{"Some": value}` on the wire."""
    return Union[SomeOption[inner], NoneOption]


def option(value: Optional[str]) -> Union[SomeOption[str], NoneOption]:
    """Wraps an optional string, the only option payload commands carry."""
    if value is None:
        return NoneOption()
    return SomeOption[str](value=value)
