"""
Pytest fixtures for the secretcli tests.
"""
import json
import subprocess
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from secretcli import CLIConfig, ContractCache, SecretCLI
from secretcli._rate_limited_log import reset_rate_limited_log

# Constants for testing
TEST_BINARY = "secretd"
TEST_CODE_ID = "7"
TEST_ADDRESS = "secret1qyqszqgpqyqszqgpqyqszqgpqyqszqgpjnp6hn"
TEST_CODE_HASH = "5c1ba4b7fa0b5d6e4b0ec5f9d0c7d8e3a1b2c3d4e5f60718293a4b5c6d7e8f90"
STORE_HASH = "A1" * 32
INIT_HASH = "B2" * 32
EXEC_HASH = "C3" * 32


# Make time.sleep instantaneous so retries don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _reset_log_cache():
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


class FakeDaemon:
    """
    Stand-in for ``subprocess.run`` that answers daemon commands.

    Responses are registered against an argument prefix (without the
    binary). The longest registered prefix wins; a list of responses is
    consumed in order with the last one repeated.
    """

    def __init__(self):
        self.responses: Dict[Tuple[str, ...], List[Tuple[str, str, int]]] = {}
        self.calls: List[List[str]] = []

    def add(
        self,
        prefix: Sequence[str],
        stdout: Union[str, Any] = "",
        stderr: str = "",
        returncode: int = 0
    ) -> "FakeDaemon":
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)
        self.responses.setdefault(tuple(prefix), []).append((stdout, stderr, returncode))
        return self

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        args = tuple(argv[1:])
        match: Optional[Tuple[str, ...]] = None
        for prefix in self.responses:
            if args[:len(prefix)] == prefix and (match is None or len(prefix) > len(match)):
                match = prefix
        if match is None:
            return subprocess.CompletedProcess(argv, 1, "", f"unknown command: {' '.join(args)}")

        queue = self.responses[match]
        stdout, stderr, returncode = queue.pop(0) if len(queue) > 1 else queue[0]
        return subprocess.CompletedProcess(argv, returncode, stdout, stderr)

    def commands(self, *prefix: str) -> List[List[str]]:
        """Calls (without the binary) that start with ``prefix``"""
        return [call[1:] for call in self.calls if tuple(call[1:1 + len(prefix)]) == prefix]


@pytest.fixture
def fake_daemon(monkeypatch):
    """Patch subprocess.run in the runner with a FakeDaemon"""
    daemon = FakeDaemon()
    monkeypatch.setattr("secretcli.runner.subprocess.run", daemon)
    return daemon


@pytest.fixture
def config(tmp_path):
    return CLIConfig(cache_dir=str(tmp_path / "cached_contracts"))


@pytest.fixture
def client(config, fake_daemon):
    return SecretCLI(config=config)


@pytest.fixture
def cache(config):
    return ContractCache(config=config)


def tx_query(txhash: str, attributes: List[Dict[str, str]], raw_log: str = "[]") -> Dict[str, Any]:
    """Build a ``q tx`` response with a single log and event"""
    return {
        "height": "1234",
        "txhash": txhash,
        "code": 0,
        "raw_log": raw_log,
        "logs": [{"msg_index": 0, "log": "", "events": [{"type": "message", "attributes": attributes}]}],
        "gas_wanted": "10000000",
        "gas_used": "1532841",
    }


@pytest.fixture
def deploy_daemon(fake_daemon):
    """FakeDaemon answering a full store + instantiate + list-code round"""
    fake_daemon.add(["tx", "compute", "store"], {"txhash": STORE_HASH, "height": "0", "code": 0, "raw_log": "[]"})
    fake_daemon.add(["q", "tx", STORE_HASH], tx_query(STORE_HASH, [
        {"key": "action", "value": "/secret.compute.v1beta1.MsgStoreCode"},
        {"key": "code_id", "value": TEST_CODE_ID},
    ]))
    fake_daemon.add(["tx", "compute", "instantiate"], {"txhash": INIT_HASH, "height": "0", "code": 0, "raw_log": "[]"})
    fake_daemon.add(["q", "tx", INIT_HASH], tx_query(INIT_HASH, [
        {"key": "action", "value": "/secret.compute.v1beta1.MsgInstantiateContract"},
        {"key": "contract_address", "value": TEST_ADDRESS},
    ]))
    fake_daemon.add(["query", "compute", "list-code"], [
        {"code_id": 3, "creator": "secret1creator", "code_hash": "ff" * 32},
        {"code_id": 7, "creator": "secret1creator", "code_hash": TEST_CODE_HASH},
    ])
    return fake_daemon
