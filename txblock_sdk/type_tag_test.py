# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import unittest

from txblock_sdk.account_address import AccountAddress
from txblock_sdk.bcs import Deserializer, Serializer
from txblock_sdk.errors import InvalidTypeTag
from txblock_sdk.type_tag import (
    PrimitiveTag,
    StructTag,
    TypeTag,
    TypeTagParser,
    VectorTag,
)

FRAMEWORK = str(AccountAddress.from_str("0x2"))


class Test(unittest.TestCase):
    def test_primitives(self):
        for name in ["bool", "u8", "u16", "u32", "u64", "u128", "u256", "address"]:
            self.assertEqual(str(TypeTag.from_str(name)), name)

    def test_vector(self):
        tag = TypeTag.from_str("vector<vector<u8>>")
        self.assertEqual(
            tag,
            TypeTag(VectorTag(TypeTag(VectorTag(TypeTag(PrimitiveTag(TypeTag.U8)))))),
        )
        self.assertEqual(str(tag), "vector<vector<u8>>")

    def test_struct_with_type_arguments(self):
        tag = TypeTag.from_str("0x2::coin::Coin<0x2::sui::SUI>")
        self.assertIsInstance(tag.value, StructTag)
        self.assertEqual(tag.value.module, "coin")
        self.assertEqual(tag.value.name, "Coin")
        self.assertEqual(str(tag), f"{FRAMEWORK}::coin::Coin<{FRAMEWORK}::sui::SUI>")

    def test_nested_generics(self):
        tag = TypeTag.from_str("0x2::pair::Pair<u8, vector<u64>>")
        self.assertEqual(str(tag), f"{FRAMEWORK}::pair::Pair<u8, vector<u64>>")
        self.assertEqual(len(tag.value.type_args), 2)

    def test_strict_requires_prefixed_address(self):
        with self.assertRaises(InvalidTypeTag):
            TypeTagParser().parse("2::sui::SUI", True)

        relaxed = TypeTagParser().parse("2::sui::SUI", False)
        self.assertEqual(relaxed, TypeTag.from_str("0x2::sui::SUI"))

    def test_malformed(self):
        for text in [
            "",
            "   ",
            "u65",
            "vector<u8",
            "u64>",
            "0x2::coin",
            "0x2:coin::Coin",
            "0x2::coin::Coin<>",
            "0x2::coin::Coin<u8,>",
            "0x2::9coin::Coin",
            "0xzz::coin::Coin",
        ]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidTypeTag):
                    TypeTag.from_str(text)

    def test_invalid_type_tag_is_value_error(self):
        with self.assertRaises(ValueError):
            TypeTag.from_str("vector<")

    def test_struct_tag_from_str(self):
        self.assertEqual(StructTag.from_str("0x2::sui::SUI").name, "SUI")
        with self.assertRaises(InvalidTypeTag):
            StructTag.from_str("u8")

    def test_serialization(self):
        tag = TypeTag.from_str("0x2::coin::Coin<vector<u8>>")

        ser = Serializer()
        tag.serialize(ser)
        der = Deserializer(ser.output())

        self.assertEqual(TypeTag.deserialize(der), tag)
        self.assertEqual(der.remaining(), 0)

    def test_primitive_layout(self):
        ser = Serializer()
        TypeTag.from_str("u64").serialize(ser)
        self.assertEqual(ser.output(), b"\x02")


if __name__ == "__main__":
    unittest.main()
