#!/usr/bin/env python3
"""
Deploy a counter contract to a local secretd node and exercise it.

Usage:
    python deploy_counter.py path/to/contract.wasm.gz

Environment:
    SECRETCLI_BINARY, SECRETCLI_CACHE_DIR and the other SECRETCLI_* variables
    are honoured. The key "a" must exist in the test keyring.
"""
import logging
import sys

from secretcli import (
    HandleMsg,
    InitMsg,
    QueryMsg,
    SecretCLI,
    deploy_contract,
    handle_contract,
)


class CounterInit(InitMsg):
    count: int


class Increment(HandleMsg):
    increment: dict = {}


class GetCount(QueryMsg):
    get_count: dict = {}


def main():
    """
    Deploy (or reuse) the counter, increment it and read it back.
    """
    if len(sys.argv) != 2:
        print("Usage: deploy_counter.py path/to/contract.wasm.gz")
        return 1

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    client = SecretCLI()
    print(f"Deployer address: {client.account_address('a')}")

    counter = deploy_contract(
        client,
        CounterInit(count=0),
        sys.argv[1],
        "counter-example",
        "a",
        backend="test",
        name="counter",
    )
    if not counter.is_resolved:
        print(f"Deployment incomplete: {counter}")
        return 1
    print(f"Counter at {counter.address} (code {counter.id}, hash {counter.code_hash})")

    computed, queried = handle_contract(client, Increment(), counter, "a", backend="test")
    print(f"Increment tx {queried.txhash}: {computed.output_data_as_string}")

    print(f"Count: {GetCount().t_query(client, counter)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
