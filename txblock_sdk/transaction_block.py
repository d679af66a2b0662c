# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Assembles an ordered list of commands together with the inputs they reference, checks
that every reference points backwards, and works out how each input must be encoded.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import Field, ValidationError
from typing_extensions import Annotated, Literal

from .account_address import AccountAddress, ParseAddressError
from .arguments import FrozenList, GasCoin, Input, NestedResult, Result, WireModel
from .bcs import Deserializer, Serializer
from .commands import (
    Commands,
    TransactionCommand,
    command_encodings,
    deserialize_command,
    get_transaction_command_type,
    parse_command,
)
from .config import BuilderConfig
from .encoding import (
    ObjectEncoding,
    PureEncoding,
    WellKnownEncoding,
    encode_with,
    resolve_encoding,
)
from .errors import (
    DanglingReference,
    EncodingConflict,
    LimitExceeded,
    SchemaMismatch,
)

logger = logging.getLogger(__name__)

VERSION = 1

# Normalized parameter types per move call target, keyed as package::module::function.
Abis = Mapping[str, Sequence[Any]]


def _normalize_target(target: str) -> str:
    package, _, rest = target.partition("::")
    try:
        package = AccountAddress.from_str_relaxed(package).short_str()
    except ParseAddressError:
        pass
    return f"{package}::{rest}"


class TransactionBlockData(WireModel):
    version: Literal[1]
    inputs: FrozenList(Input)
    commands: FrozenList(Annotated[TransactionCommand, Field(discriminator="kind")])


class TransactionBlock:
    """A mutable builder for the body of a programmable transaction block."""

    config: BuilderConfig
    _inputs: List[Input]
    _commands: List[Any]
    _pure_types: Dict[int, str]

    def __init__(self, config: Optional[BuilderConfig] = None):
        self.config = config or BuilderConfig()
        self._inputs = []
        self._commands = []
        self._pure_types = {}

    def __str__(self) -> str:
        commands = "\n".join(
            f"  {index}: {command}" for index, command in enumerate(self._commands)
        )
        return f"TransactionBlock({len(self._inputs)} inputs)\n{commands}"

    @property
    def inputs(self) -> Tuple[Input, ...]:
        return tuple(self._inputs)

    @property
    def commands(self) -> Tuple[Any, ...]:
        return tuple(self._commands)

    @property
    def gas(self) -> GasCoin:
        return GasCoin()

    #
    # Inputs
    #

    def input(self, value: Any = None, name: Optional[str] = None) -> Input:
        if len(self._inputs) >= self.config.max_inputs:
            raise LimitExceeded(f"A block holds at most {self.config.max_inputs} inputs")
        argument = Input(index=len(self._inputs), name=name, value=value)
        self._inputs.append(argument)
        return argument

    def pure(self, value: Any, type: Optional[str] = None) -> Input:
        """Adds a pure input. The type may be left out when a command slot declares it."""
        argument = self.input(value)
        if type is not None:
            self._pure_types[argument.index] = type
        return argument

    def object(self, object_id: str) -> Input:
        try:
            address = AccountAddress.from_str(object_id)
        except ParseAddressError as e:
            raise SchemaMismatch(f"Invalid object id {object_id}: {e}") from e
        return self.input(str(address))

    #
    # Commands
    #

    def add(self, command: Any) -> Result:
        """Appends a command, given as a record or as untyped data, and returns its result."""
        if len(self._commands) >= self.config.max_commands:
            raise LimitExceeded(
                f"A block holds at most {self.config.max_commands} commands"
            )
        if not isinstance(command, WireModel):
            command = parse_command(command)
        self._commands.append(command)
        logger.debug("added command %d: %s", len(self._commands) - 1, command)
        return Result(index=len(self._commands) - 1)

    def move_call(
        self,
        target: str,
        type_arguments: Sequence[Any] = (),
        arguments: Sequence[Any] = (),
    ) -> Result:
        return self.add(
            Commands.move_call(target, type_arguments, arguments, config=self.config)
        )

    def transfer_objects(self, objects: Sequence[Any], address: Any) -> Result:
        return self.add(Commands.transfer_objects(objects, address))

    def split_coin(self, coin: Any, amount: Any) -> Result:
        return self.add(Commands.split_coin(coin, amount))

    def merge_coins(self, destination: Any, sources: Sequence[Any]) -> Result:
        return self.add(Commands.merge_coins(destination, sources))

    def make_move_vec(self, objects: Sequence[Any], type: Optional[str] = None) -> Result:
        return self.add(Commands.make_move_vec(objects, type, config=self.config))

    def publish(self, modules: Sequence[Union[bytes, Sequence[int]]]) -> Result:
        return self.add(Commands.publish(modules))

    #
    # Validation
    #

    def validate(self, check_references: Optional[bool] = None):
        """
        Re-validates every command structurally. Unless disabled, also checks that inputs
        exist and that results only come from earlier commands.
        """
        if check_references is None:
            check_references = self.config.check_references

        for index, command in enumerate(self._commands):
            get_transaction_command_type(command)
            if check_references:
                for _, _, argument, _ in command_encodings(command):
                    self._check_reference(index, argument)

    def _check_reference(self, command_index: int, argument: Any):
        if isinstance(argument, Input):
            if argument.index >= len(self._inputs):
                raise DanglingReference(
                    command_index,
                    argument,
                    f"the block only has {len(self._inputs)} inputs",
                )
        elif isinstance(argument, (Result, NestedResult)):
            if argument.index >= command_index:
                raise DanglingReference(
                    command_index,
                    argument,
                    "results may only come from earlier commands",
                )

    #
    # Encoding
    #

    def input_encodings(self, abis: Optional[Abis] = None) -> Dict[int, WellKnownEncoding]:
        """
        Decides, for every input, whether it is an object or a pure value and of which
        type. Command slots declare it through their schema, move call arguments take it
        from the given ABIs. Inputs used in incompatible ways raise EncodingConflict.
        """
        encodings: Dict[int, WellKnownEncoding] = {
            index: PureEncoding(type=type_name)
            for index, type_name in self._pure_types.items()
        }

        for command in self._commands:
            for field, position, argument, encoding in command_encodings(command):
                if not isinstance(argument, Input):
                    continue
                if encoding is None and abis is not None:
                    encoding = self._abi_encoding(command, position, abis)
                if encoding is None:
                    continue
                known = encodings.get(argument.index)
                if known is not None and known != encoding:
                    raise EncodingConflict(
                        f"Input {argument.index} is used as {known.to_dict()} and as "
                        f"{encoding.to_dict()} by {command.kind}.{field}"
                    )
                encodings[argument.index] = encoding
        return encodings

    @staticmethod
    def _abi_encoding(
        command: Any, position: Optional[int], abis: Abis
    ) -> Optional[WellKnownEncoding]:
        target = getattr(command, "target", None)
        if target is None or position is None:
            return None
        normalized = {_normalize_target(key): value for key, value in abis.items()}
        parameters = normalized.get(_normalize_target(target()))
        if parameters is None or position >= len(parameters):
            return None
        return resolve_encoding(parameters[position])

    def encoded_inputs(self, abis: Optional[Abis] = None) -> Dict[int, Union[bytes, str]]:
        """Pure inputs as BCS bytes, object inputs as their object id."""
        encodings = self.input_encodings(abis)
        encoded: Dict[int, Union[bytes, str]] = {}
        for argument in self._inputs:
            encoding = encodings.get(argument.index)
            if encoding is None:
                raise SchemaMismatch(f"No encoding could be decided for {argument}")
            if isinstance(encoding, ObjectEncoding):
                encoded[argument.index] = argument.value
            else:
                encoded[argument.index] = encode_with(encoding, argument.value)
        return encoded

    #
    # Wire formats
    #

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": VERSION,
            "inputs": [argument.to_dict() for argument in self._inputs],
            "commands": [command.to_dict() for command in self._commands],
        }

    @staticmethod
    def from_dict(
        data: Any, config: Optional[BuilderConfig] = None
    ) -> TransactionBlock:
        try:
            block_data = TransactionBlockData.model_validate(data)
        except ValidationError as e:
            raise SchemaMismatch(f"Value is not a valid transaction block: {e}") from e

        block = TransactionBlock(config)
        for position, argument in enumerate(block_data.inputs):
            if argument.index != position:
                raise SchemaMismatch(
                    f"Input at position {position} carries index {argument.index}"
                )
            block.input(argument.value, argument.name)
        for command in block_data.commands:
            block.add(command)
        return block

    def serialize_commands(self) -> bytes:
        ser = Serializer()
        ser.sequence(self._commands, Serializer.struct)
        return ser.output()

    @staticmethod
    def deserialize_commands(data: bytes) -> List[TransactionCommand]:
        der = Deserializer(data)
        return der.sequence(deserialize_command)
