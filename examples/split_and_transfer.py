# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Builds a block that splits two coins off the gas coin, merges one of them back into an
owned coin, and sends the other to a recipient. Prints the wire form and the encoded
inputs.
"""

import json
import logging

from txblock_sdk.applogging import init_logging
from txblock_sdk.transaction_block import TransactionBlock

RECIPIENT = "0x7d20dcdb2bca4f508ea9613994683eb4e76e9c4ed371169677c1be02aaf0b58e"
OWNED_COIN = "0x5d8f5e1c1a3b4f0c8d2e6a9b7c3f1e0d2a4b6c8e0f1a3b5c7d9e1f2a4b6c8d0e"
OTHER_COIN = "0x1c2e5f0a9b8d7c6e4f3a2b1c0d9e8f7a6b5c4d3e2f1a0b9c8d7e6f5a4b3c2d1e"

COIN_VALUE_ABI = {
    "0x2::coin::value": [
        {
            "Reference": {
                "Struct": {
                    "address": "0x2",
                    "module": "coin",
                    "name": "Coin",
                    "typeArguments": [],
                }
            }
        }
    ]
}


def main():
    init_logging(logging.getLogger(""), logging.DEBUG)

    txb = TransactionBlock()
    first = txb.split_coin(txb.gas, txb.pure(1_000))
    second = txb.split_coin(txb.gas, txb.pure(2_000))
    txb.merge_coins(txb.object(OWNED_COIN), [first])
    txb.transfer_objects([second], txb.pure(RECIPIENT))
    txb.move_call(
        "0x2::coin::value",
        ["0x2::sui::SUI"],
        [txb.object(OTHER_COIN)],
    )
    txb.validate(check_references=True)

    print(json.dumps(txb.to_dict(), indent=2, default=str))
    for index, value in txb.encoded_inputs(COIN_VALUE_ABI).items():
        print(index, value.hex() if isinstance(value, bytes) else value)


if __name__ == "__main__":
    main()
