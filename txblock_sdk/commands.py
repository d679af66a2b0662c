# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
The six instructions of a programmable transaction block, the discriminator that
classifies untyped data into one of them, and the helpers used to build them.
"""

import logging
from typing import Any, ClassVar, Iterable, List, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer, StrictInt
from pydantic import StrictStr, TypeAdapter, ValidationError, field_validator
from typing_extensions import Annotated, Literal

from .account_address import AccountAddress, ParseAddressError
from .arguments import (
    Argument,
    ArgumentTypes,
    FrozenList,
    NoneOption,
    ObjectArgument,
    Option,
    PureArgument,
    SomeOption,
    WireModel,
    deserialize_argument,
    option,
)
from .bcs import BcsError, Deserializer, Serializer
from .config import BuilderConfig
from .encoding import WellKnownEncoding, field_encoding
from .errors import InvalidCommand, MalformedTarget, SchemaMismatch
from .type_tag import IDENTIFIER, TypeTag, TypeTagAdapter, TypeTagParser

logger = logging.getLogger(__name__)

DEFAULT_TYPE_TAG_ADAPTER: TypeTagAdapter = TypeTagParser()


def _parse_type_tag(value: Any) -> Any:
    # Type tags are opaque here, strings from untyped data go through the strict parser.
    if isinstance(value, str):
        return DEFAULT_TYPE_TAG_ADAPTER.parse(value, True)
    return value


TypeTagValue = Annotated[
    TypeTag,
    BeforeValidator(_parse_type_tag),
    PlainSerializer(str, return_type=str),
]

Byte = Annotated[StrictInt, Field(ge=0, le=255)]


class MoveCall(WireModel):
    VARIANT: ClassVar[int] = 0

    kind: Literal["MoveCall"]
    package: StrictStr
    module: StrictStr
    function: StrictStr
    type_arguments: FrozenList(TypeTagValue) = Field(alias="typeArguments")
    arguments: FrozenList(Argument)

    def __str__(self) -> str:
        type_args = ", ".join(str(type_arg) for type_arg in self.type_arguments)
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.package}::{self.module}::{self.function}<{type_args}>({args})"

    def target(self) -> str:
        return f"{self.package}::{self.module}::{self.function}"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "MoveCall":
        package = deserializer.struct(AccountAddress)
        module = deserializer.str()
        function = deserializer.str()
        type_arguments = deserializer.sequence(TypeTag.deserialize)
        arguments = deserializer.sequence(deserialize_argument)
        return MoveCall(
            package=str(package),
            module=module,
            function=function,
            type_arguments=type_arguments,
            arguments=arguments,
        )

    def serialize(self, serializer: Serializer):
        try:
            package = AccountAddress.from_str(self.package)
        except ParseAddressError as e:
            raise BcsError(f"Invalid package address {self.package}: {e}") from e
        serializer.uleb128(self.VARIANT)
        serializer.struct(package)
        serializer.str(self.module)
        serializer.str(self.function)
        serializer.sequence(self.type_arguments, Serializer.struct)
        serializer.sequence(self.arguments, Serializer.struct)


class TransferObjects(WireModel):
    VARIANT: ClassVar[int] = 1

    kind: Literal["TransferObjects"]
    objects: FrozenList(ObjectArgument)
    address: PureArgument("address")

    def __str__(self) -> str:
        objects = ", ".join(str(obj) for obj in self.objects)
        return f"TransferObjects([{objects}], {self.address})"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "TransferObjects":
        objects = deserializer.sequence(deserialize_argument)
        return TransferObjects(objects=objects, address=deserialize_argument(deserializer))

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.sequence(self.objects, Serializer.struct)
        serializer.struct(self.address)


class SplitCoin(WireModel):
    VARIANT: ClassVar[int] = 2

    kind: Literal["SplitCoin"]
    coin: ObjectArgument
    amount: PureArgument("u64")

    def __str__(self) -> str:
        return f"SplitCoin({self.coin}, {self.amount})"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "SplitCoin":
        coin = deserialize_argument(deserializer)
        return SplitCoin(coin=coin, amount=deserialize_argument(deserializer))

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.struct(self.coin)
        serializer.struct(self.amount)


class MergeCoins(WireModel):
    VARIANT: ClassVar[int] = 3

    kind: Literal["MergeCoins"]
    destination: ObjectArgument
    sources: FrozenList(ObjectArgument)

    def __str__(self) -> str:
        sources = ", ".join(str(source) for source in self.sources)
        return f"MergeCoins({self.destination}, [{sources}])"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "MergeCoins":
        destination = deserialize_argument(deserializer)
        sources = deserializer.sequence(deserialize_argument)
        return MergeCoins(destination=destination, sources=sources)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.struct(self.destination)
        serializer.sequence(self.sources, Serializer.struct)


class Publish(WireModel):
    VARIANT: ClassVar[int] = 4

    kind: Literal["Publish"]
    modules: FrozenList(FrozenList(Byte))

    def __str__(self) -> str:
        return f"Publish({len(self.modules)} modules)"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "Publish":
        modules = deserializer.sequence(Deserializer.to_bytes)
        return Publish(modules=tuple(tuple(module) for module in modules))

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.sequence(
            [bytes(module) for module in self.modules], Serializer.to_bytes
        )


class MakeMoveVec(WireModel):
    VARIANT: ClassVar[int] = 5

    kind: Literal["MakeMoveVec"]
    type: Option(str) = Field(default_factory=NoneOption)
    objects: FrozenList(ObjectArgument)

    @field_validator("type")
    @classmethod
    def _element_type_parses(cls, value: Any) -> Any:
        if isinstance(value, SomeOption):
            DEFAULT_TYPE_TAG_ADAPTER.parse(value.value, True)
        return value

    def __str__(self) -> str:
        objects = ", ".join(str(obj) for obj in self.objects)
        return f"MakeMoveVec<{self.type}>([{objects}])"

    def element_type(self) -> Optional[TypeTag]:
        if isinstance(self.type, SomeOption):
            return DEFAULT_TYPE_TAG_ADAPTER.parse(self.type.value, True)
        return None

    @staticmethod
    def deserialize(deserializer: Deserializer) -> "MakeMoveVec":
        element_type = deserializer.option(TypeTag.deserialize)
        objects = deserializer.sequence(deserialize_argument)
        return MakeMoveVec(
            type=option(None if element_type is None else str(element_type)),
            objects=objects,
        )

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.VARIANT)
        serializer.option(self.element_type(), Serializer.struct)
        serializer.sequence(self.objects, Serializer.struct)


# Declaration order matters: the discriminator reports the first variant that matches.
TransactionCommandTypes: Tuple[Type[WireModel], ...] = (
    MoveCall,
    TransferObjects,
    SplitCoin,
    MergeCoins,
    Publish,
    MakeMoveVec,
)

TransactionCommand = Union[
    MoveCall, TransferObjects, SplitCoin, MergeCoins, Publish, MakeMoveVec
]

_command_adapter: TypeAdapter = TypeAdapter(
    Annotated[TransactionCommand, Field(discriminator="kind")]
)


def _untyped(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return data


def parse_command(data: Any) -> TransactionCommand:
    """Validates untyped data, e.g. a decoded JSON record, into a command."""
    try:
        return _command_adapter.validate_python(_untyped(data))
    except ValidationError as e:
        raise InvalidCommand(data, str(e)) from e


def is_command(data: Any, schema: Optional[Type[WireModel]] = None) -> bool:
    """True if data matches the whole command union, or one variant when given."""
    try:
        if schema is None:
            _command_adapter.validate_python(_untyped(data))
        else:
            schema.model_validate(_untyped(data))
    except ValidationError:
        return False
    return True


def get_transaction_command_type(data: Any) -> Type[WireModel]:
    """
    Asserts that data is a transaction command and returns the schema of the variant it
    matches. Well formed data matches exactly one variant through its `kind`, the order
    only decides between shapes that would otherwise both accept a malformed value.
    """
    parse_command(data)
    for schema in TransactionCommandTypes:
        if is_command(data, schema):
            return schema
    raise InvalidCommand(data, "no command variant accepted the value")


def deserialize_command(deserializer: Deserializer) -> TransactionCommand:
    variant = deserializer.uleb128()
    for schema in TransactionCommandTypes:
        if schema.VARIANT == variant:
            return schema.deserialize(deserializer)
    raise BcsError(f"Invalid command variant {variant}")


def command_encodings(
    command: WireModel,
) -> List[Tuple[str, Optional[int], Any, Optional[WellKnownEncoding]]]:
    """
    Lists every argument slot of a command as (field, position, argument, encoding).
    Position is None for single argument fields. The encoding comes from the schema of
    the field, whatever argument variant occupies it.
    """
    slots: List[Tuple[str, Optional[int], Any, Optional[WellKnownEncoding]]] = []
    for name in type(command).model_fields:
        value = getattr(command, name)
        if isinstance(value, ArgumentTypes):
            slots.append((name, None, value, field_encoding(type(command), name)))
        elif isinstance(value, tuple):
            encoding = field_encoding(type(command), name)
            for position, item in enumerate(value):
                if isinstance(item, ArgumentTypes):
                    slots.append((name, position, item, encoding))
    return slots


def _build(schema: Type[WireModel], **fields: Any) -> Any:
    try:
        return schema(**fields)
    except ValidationError as e:
        raise SchemaMismatch(f"Invalid {schema.__name__} fields: {e}") from e


class Commands:
    """Simple helpers used to construct commands."""

    @staticmethod
    def move_call(
        target: str,
        type_arguments: Iterable[Union[str, TypeTag]] = (),
        arguments: Iterable[Any] = (),
        adapter: Optional[TypeTagAdapter] = None,
        config: Optional[BuilderConfig] = None,
    ) -> MoveCall:
        config = config or BuilderConfig()
        adapter = adapter or DEFAULT_TYPE_TAG_ADAPTER

        parts = target.split(config.target_separator)
        if len(parts) != 3 or not all(parts):
            raise MalformedTarget(target, config.target_separator)
        package, module, function = parts
        if not IDENTIFIER.match(module) or not IDENTIFIER.match(function):
            raise MalformedTarget(target, config.target_separator)

        type_tags = tuple(
            tag
            if isinstance(tag, TypeTag)
            else adapter.parse(tag, config.strict_type_tags)
            for tag in type_arguments
        )
        logger.debug("built move call %s with %d type arguments", target, len(type_tags))
        return _build(
            MoveCall,
            package=package,
            module=module,
            function=function,
            type_arguments=type_tags,
            arguments=tuple(arguments),
        )

    @staticmethod
    def transfer_objects(objects: Sequence[Any], address: Any) -> TransferObjects:
        return _build(TransferObjects, objects=tuple(objects), address=address)

    @staticmethod
    def split_coin(coin: Any, amount: Any) -> SplitCoin:
        return _build(SplitCoin, coin=coin, amount=amount)

    @staticmethod
    def merge_coins(destination: Any, sources: Sequence[Any]) -> MergeCoins:
        return _build(MergeCoins, destination=destination, sources=tuple(sources))

    @staticmethod
    def publish(modules: Sequence[Union[bytes, Sequence[int]]]) -> Publish:
        return _build(Publish, modules=tuple(tuple(module) for module in modules))

    @staticmethod
    def make_move_vec(
        objects: Sequence[Any],
        type: Optional[str] = None,
        adapter: Optional[TypeTagAdapter] = None,
        config: Optional[BuilderConfig] = None,
    ) -> MakeMoveVec:
        """
        An empty or missing type leaves the element type to be inferred. Any other type
        is parsed up front and stored in its canonical form.
        """
        config = config or BuilderConfig()
        adapter = adapter or DEFAULT_TYPE_TAG_ADAPTER

        element_type = None
        if type:
            element_type = str(adapter.parse(type, config.strict_type_tags))
        return _build(MakeMoveVec, type=option(element_type), objects=tuple(objects))
