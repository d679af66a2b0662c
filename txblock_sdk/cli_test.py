# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from txblock_sdk import cli
from txblock_sdk.arguments import Result
from txblock_sdk.transaction_block import TransactionBlock


def split_and_transfer() -> TransactionBlock:
    txb = TransactionBlock()
    coin = txb.split_coin(txb.gas, txb.pure(1000))
    txb.transfer_objects([coin], txb.pure("0x2"))
    return txb


def dangling() -> TransactionBlock:
    txb = TransactionBlock()
    txb.transfer_objects([Result(index=5)], txb.pure("0x2"))
    return txb


@patch("txblock_sdk.cli.init_logging")
class Test(unittest.TestCase):
    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.directory.cleanup()

    def write(self, name: str, content: str) -> str:
        path = os.path.join(self.directory.name, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    def run_main(self, args):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = cli.main(args)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_inspect_block(self, _init_logging):
        self.assertEqual(
            cli.inspect_block(split_and_transfer()),
            [
                "0: SplitCoin",
                '    coin = GasCoin -> {"kind": "object"}',
                '    amount = Input(0) -> {"kind": "pure", "type": "u64"}',
                "1: TransferObjects",
                '    objects[0] = Result(0) -> {"kind": "object"}',
                '    address = Input(1) -> {"kind": "pure", "type": "address"}',
            ],
        )

    def test_inspect_move_call(self, _init_logging):
        txb = TransactionBlock()
        txb.move_call("0x2::m::f", [], [txb.pure(1)])
        self.assertEqual(
            cli.inspect_block(txb),
            ["0: MoveCall", "    arguments[0] = Input(0) -> unresolved"],
        )

    def test_inspect(self, init_logging):
        path = self.write("block.json", json.dumps(split_and_transfer().to_dict()))
        code, stdout, _ = self.run_main(["inspect", path])
        self.assertEqual(code, 0)
        self.assertIn("1: TransferObjects", stdout)
        init_logging.assert_called_once()

    def test_validate(self, _init_logging):
        path = self.write("block.json", json.dumps(split_and_transfer().to_dict()))
        code, stdout, _ = self.run_main(["validate", path])
        self.assertEqual(code, 0)
        self.assertEqual(stdout, "ok: 2 commands, 2 inputs\n")

    def test_validate_dangling(self, _init_logging):
        path = self.write("dangling.json", json.dumps(dangling().to_dict()))
        code, _, stderr = self.run_main(["validate", path])
        self.assertEqual(code, 1)
        self.assertIn("Command 0 references Result(5)", stderr)

        code, _, _ = self.run_main(["validate", path, "--no-references"])
        self.assertEqual(code, 0)

    def test_errors(self, _init_logging):
        invalid_json = self.write("invalid.json", "{")
        invalid_block = self.write("invalid_block.json", json.dumps({"version": 1}))
        missing = os.path.join(self.directory.name, "missing.json")
        for path in [invalid_json, invalid_block, missing]:
            with self.subTest(path=path):
                code, stdout, stderr = self.run_main(["validate", path])
                self.assertEqual(code, 1)
                self.assertEqual(stdout, "")
                self.assertTrue(stderr.startswith("error: "))


if __name__ == "__main__":
    unittest.main()
