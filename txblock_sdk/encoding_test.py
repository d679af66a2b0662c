# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import unittest

from txblock_sdk.account_address import AccountAddress
from txblock_sdk.arguments import Argument, ObjectArgument, PureArgument
from txblock_sdk.bcs import BcsError
from txblock_sdk.commands import (
    MakeMoveVec,
    MergeCoins,
    MoveCall,
    SplitCoin,
    TransferObjects,
)
from txblock_sdk.encoding import (
    ObjectEncoding,
    PureEncoding,
    encode_pure,
    encode_with,
    field_encoding,
    get_encoding,
    resolve_encoding,
)
from txblock_sdk.errors import SchemaMismatch, UnsupportedPureType


def struct(address, module, name):
    return {
        "Struct": {
            "address": address,
            "module": module,
            "name": name,
            "typeArguments": [],
        }
    }


class Test(unittest.TestCase):
    def test_get_encoding(self):
        self.assertEqual(get_encoding(ObjectArgument), ObjectEncoding())
        self.assertEqual(get_encoding(PureArgument("u64")), PureEncoding(type="u64"))
        self.assertIsNone(get_encoding(Argument))
        self.assertIsNone(get_encoding(int))

    def test_field_encoding(self):
        self.assertEqual(field_encoding(SplitCoin, "coin"), ObjectEncoding())
        self.assertEqual(field_encoding(SplitCoin, "amount"), PureEncoding(type="u64"))
        self.assertEqual(field_encoding(TransferObjects, "objects"), ObjectEncoding())
        self.assertEqual(
            field_encoding(TransferObjects, "address"), PureEncoding(type="address")
        )
        self.assertEqual(field_encoding(MergeCoins, "destination"), ObjectEncoding())
        self.assertEqual(field_encoding(MergeCoins, "sources"), ObjectEncoding())
        self.assertEqual(field_encoding(MakeMoveVec, "objects"), ObjectEncoding())
        self.assertIsNone(field_encoding(MoveCall, "arguments"))

    def test_to_dict(self):
        self.assertEqual(ObjectEncoding().to_dict(), {"kind": "object"})
        self.assertEqual(
            PureEncoding(type="u64").to_dict(), {"kind": "pure", "type": "u64"}
        )

    def test_encode_pure(self):
        self.assertEqual(encode_pure("bool", True), b"\x01")
        self.assertEqual(encode_pure("u64", 1000), (1000).to_bytes(8, "little"))
        self.assertEqual(encode_pure("address", "0x2"), b"\x00" * 31 + b"\x02")
        self.assertEqual(encode_pure("string", "hi"), b"\x02hi")
        self.assertEqual(encode_pure("vector<u8>", b"ab"), b"\x02ab")
        self.assertEqual(encode_pure("vector<u8>", [1, 2]), b"\x02\x01\x02")
        self.assertEqual(
            encode_pure("vector<u16>", [1, 2]), b"\x02\x01\x00\x02\x00"
        )

    def test_encode_pure_errors(self):
        with self.assertRaises(UnsupportedPureType):
            encode_pure("0x2::coin::Coin", 1)
        with self.assertRaises(UnsupportedPureType):
            encode_pure("vector<signer>", [])
        with self.assertRaises(BcsError):
            encode_pure("u8", 256)
        with self.assertRaises(BcsError):
            encode_pure("bool", 1)

    def test_encode_pure_type_mismatch(self):
        address = AccountAddress.from_str("0x2")
        self.assertEqual(encode_pure("address", address), b"\x00" * 31 + b"\x02")
        for type_name, value in [
            ("address", 5),
            ("address", None),
            ("address", "0xzz"),
            ("address", "2"),
            ("string", 5),
            ("vector<address>", [5]),
        ]:
            with self.subTest(type_name=type_name, value=value):
                with self.assertRaises(BcsError):
                    encode_pure(type_name, value)

    def test_encode_with(self):
        self.assertEqual(encode_with(PureEncoding(type="u8"), 7), b"\x07")
        with self.assertRaises(UnsupportedPureType):
            encode_with(ObjectEncoding(), "0x2")

    def test_resolve_encoding(self):
        self.assertEqual(resolve_encoding("U64"), PureEncoding(type="u64"))
        self.assertEqual(resolve_encoding("Address"), PureEncoding(type="address"))
        self.assertEqual(
            resolve_encoding({"Vector": "U8"}), PureEncoding(type="vector<u8>")
        )
        self.assertEqual(
            resolve_encoding(struct("0x1", "string", "String")),
            PureEncoding(type="string"),
        )
        self.assertEqual(
            resolve_encoding(struct("0x" + "0" * 63 + "2", "object", "ID")),
            PureEncoding(type="address"),
        )
        coin = struct("0x2", "coin", "Coin")
        self.assertEqual(resolve_encoding(coin), ObjectEncoding())
        self.assertEqual(
            resolve_encoding({"Reference": struct("0x2", "coin", "Coin")}),
            ObjectEncoding(),
        )
        self.assertEqual(
            resolve_encoding({"MutableReference": struct("0x2", "coin", "Coin")}),
            ObjectEncoding(),
        )
        self.assertEqual(resolve_encoding({"TypeParameter": 0}), ObjectEncoding())
        tx_context = struct("0x2", "tx_context", "TxContext")
        self.assertIsNone(resolve_encoding({"MutableReference": tx_context}))

    def test_resolve_malformed_struct(self):
        with self.assertRaises(SchemaMismatch):
            resolve_encoding(struct("0xzz", "coin", "Coin"))
        with self.assertRaises(SchemaMismatch):
            resolve_encoding({"Reference": {"Struct": {"module": "coin", "name": "C"}}})

    def test_resolve_signer(self):
        with self.assertRaises(UnsupportedPureType):
            resolve_encoding("Signer")
        with self.assertRaises(UnsupportedPureType):
            resolve_encoding({"Reference": "Signer"})


if __name__ == "__main__":
    unittest.main()
