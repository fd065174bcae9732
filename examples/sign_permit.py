#!/usr/bin/env python3
"""
Sign a SNIP-24 query permit with a keyring key.

Usage:
    python sign_permit.py <key-name> <token-address> [chain-id]
"""
import json
import sys

from secretcli import SecretCLI


def main():
    if len(sys.argv) < 3:
        print("Usage: sign_permit.py <key-name> <token-address> [chain-id]")
        return 1

    key_name, token = sys.argv[1], sys.argv[2]
    chain_id = sys.argv[3] if len(sys.argv) > 3 else "secretdev-1"

    document = {
        "chain_id": chain_id,
        "account_number": "0",
        "sequence": "0",
        "fee": {"amount": [{"denom": "uscrt", "amount": "0"}], "gas": "1"},
        "msgs": [{
            "type": "query_permit",
            "value": {"permit_name": "example", "allowed_tokens": [token], "permissions": ["balance"]},
        }],
        "memo": "",
    }

    signed = SecretCLI().create_permit(document, key_name)
    print(json.dumps(signed.model_dump(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
