"""
Test harness flows composed from SecretCLI calls.

These helpers are what contract test scripts use directly: deploy a
contract end to end (optionally reusing a cached deployment), execute a
message and fetch both views of the result, or query a contract.
"""
import logging
from typing import Any, Optional, Tuple

from pydantic import BaseModel

from .cache import ContractCache
from .client import SecretCLI
from .models import NetContract, TxCompute, TxQuery
from .utils import execution_failed, find_attribute

logger = logging.getLogger(__name__)


def _report_failed_execution(client: SecretCLI, query: TxQuery, include_raw_log: bool = False) -> None:
    if not execution_failed(query):
        return
    if include_raw_log:
        logger.warning(f"Raw log: {query.raw_log}")
    logger.warning(
        f"Tx Hash (call {client.config.binary} q compute tx <hash> to see encrypted error) {query.txhash}"
    )


def init_contract(
    client: SecretCLI,
    message: Any,
    contract: NetContract,
    label: str,
    sender: str,
    gas: Optional[str] = None,
    backend: Optional[str] = None
) -> TxQuery:
    """
    Instantiate a stored contract and fetch the resulting transaction.

    Args:
        client: Client used to talk to the daemon
        message: Instantiate message
        contract: Contract whose ``id`` holds the code id
        label: Contract label
        sender: Key that signs the tx
        gas: Gas limit (default "10000000")
        backend: Keyring backend

    Returns:
        The instantiate transaction's on-chain result
    """
    tx = client.instantiate_contract(contract, message, label, sender, gas, backend)
    return client.query_hash(tx.txhash)


def store_and_instantiate(
    client: SecretCLI,
    message: Any,
    contract_file: str,
    label: str,
    sender: str,
    store_gas: Optional[str] = None,
    init_gas: Optional[str] = None,
    backend: Optional[str] = None
) -> NetContract:
    """
    Store, instantiate and resolve a contract without touching the cache.

    Fields that cannot be found in the daemon's output are left empty;
    check ``NetContract.is_resolved`` to detect that.
    """
    contract, _, _ = _deploy(client, message, contract_file, label, sender, store_gas, init_gas, backend)
    return contract


def _deploy(
    client: SecretCLI,
    message: Any,
    contract_file: str,
    label: str,
    sender: str,
    store_gas: Optional[str],
    init_gas: Optional[str],
    backend: Optional[str]
) -> Tuple[NetContract, str, str]:
    scan = client.config.attribute_scan

    store_response = client.store_contract(contract_file, sender, store_gas, backend)
    store_query = client.query_hash(store_response.txhash)

    contract = NetContract(label=label)
    code_id = find_attribute(store_query, "code_id", scan)
    if code_id is not None:
        contract.id = code_id
    else:
        logger.warning(f"No code_id attribute in store tx {store_query.txhash}")

    init_query = init_contract(client, message, contract, label, sender, init_gas, backend)
    _report_failed_execution(client, init_query)

    address = find_attribute(init_query, "contract_address", scan)
    if address is not None:
        contract.address = address
    else:
        logger.warning(f"No contract_address attribute in instantiate tx {init_query.txhash}")

    for item in client.list_code():
        if str(item.id) == contract.id:
            contract.code_hash = item.data_hash
            break

    return contract, store_query.txhash, init_query.txhash


def deploy_contract(
    client: SecretCLI,
    message: Any,
    contract_file: str,
    label: str,
    sender: str,
    store_gas: Optional[str] = None,
    init_gas: Optional[str] = None,
    backend: Optional[str] = None,
    name: Optional[str] = None,
    cache: Optional[ContractCache] = None
) -> NetContract:
    """
    Deploy a contract, reusing a cached deployment when one exists.

    Args:
        client: Client used to talk to the daemon
        message: Instantiate message
        contract_file: Path to the wasm file to store
        label: Contract label
        sender: Key that stores and instantiates the contract
        store_gas: Gas limit for the store tx
        init_gas: Gas limit for the instantiate tx
        backend: Keyring backend
        name: Cache name; without it the deployment is neither looked up nor cached.
            A deployment with unresolved fields is never cached
        cache: Contract cache (defaults to one in the configured directory)

    Returns:
        The deployed contract
    """
    cache = cache or ContractCache(config=client.config)

    lookup = cache.lookup(name)
    if lookup.hit:
        return lookup.contract

    contract, store_hash, init_hash = _deploy(
        client, message, contract_file, label, sender, store_gas, init_gas, backend
    )

    if not contract.is_resolved:
        missing = [field for field in ("id", "address", "code_hash") if not getattr(contract, field)]
        logger.warning(
            f"Contract '{label}' is missing {', '.join(missing)} after deployment "
            f"(store tx {store_hash}, instantiate tx {init_hash}); it will not be cached"
        )
    elif name is not None:
        cache.save(name, contract)
    else:
        logger.info(
            "This contract deployment will not be cached because a name was not provided upon instantiation."
        )
    return contract


def handle_contract(
    client: SecretCLI,
    message: Any,
    contract: NetContract,
    sender: str,
    gas: Optional[str] = None,
    backend: Optional[str] = None,
    amount: Optional[str] = None
) -> Tuple[TxCompute, TxQuery]:
    """
    Execute a message and fetch both the compute result and the tx result.

    A failed contract execution is only logged; both results are returned
    either way.

    Returns:
        (compute result, on-chain transaction result)
    """
    tx = client.execute_contract(contract, message, sender, gas, backend, amount)

    computed = client.compute_hash(tx.txhash)
    queried = client.query_hash(tx.txhash)
    _report_failed_execution(client, queried, include_raw_log=True)
    return computed, queried


class InitMsg(BaseModel):
    """Base for instantiate messages usable directly from test scripts"""

    def t_init(
        self,
        client: SecretCLI,
        contract: NetContract,
        label: str,
        sender: str,
        gas: Optional[str] = None,
        backend: Optional[str] = None
    ) -> TxQuery:
        """
        Instantiate ``contract`` with this message.

        Args:
            client: Client used to talk to the daemon
            contract: Contract whose ``id`` holds the code id
            label: Contract label
            sender: Key that signs the tx
            gas: Gas limit (default "10000000")
            backend: Keyring backend

        Returns:
            The instantiate transaction's on-chain result
        """
        return init_contract(client, self, contract, label, sender, gas, backend)

    def inst_init(
        self,
        client: SecretCLI,
        contract_file: str,
        label: str,
        sender: str,
        store_gas: Optional[str] = None,
        init_gas: Optional[str] = None,
        backend: Optional[str] = None
    ) -> NetContract:
        """
        Store ``contract_file`` and instantiate it with this message.

        The contract cache is neither read nor written; use
        ``deploy_contract`` with a name to reuse deployments.

        Returns:
            The deployed contract, possibly with unresolved fields
        """
        return store_and_instantiate(
            client, self, contract_file, label, sender, store_gas, init_gas, backend
        )


class HandleMsg(BaseModel):
    """Base for execute messages usable directly from test scripts"""

    def t_handle(
        self,
        client: SecretCLI,
        contract: NetContract,
        sender: str,
        gas: Optional[str] = None,
        backend: Optional[str] = None,
        amount: Optional[str] = None
    ) -> TxCompute:
        """
        Execute this message on ``contract``.

        Args:
            client: Client used to talk to the daemon
            contract: Contract whose ``address`` receives the message
            sender: Key that signs the tx
            gas: Gas limit (default "800000")
            backend: Keyring backend
            amount: Native tokens to send along

        Returns:
            The decrypted compute result
        """
        tx = client.execute_contract(contract, self, sender, gas, backend, amount)
        return client.compute_hash(tx.txhash)


class QueryMsg(BaseModel):
    """Base for query messages usable directly from test scripts"""

    def t_query(self, client: SecretCLI, contract: NetContract, response_model: Optional[type] = None) -> Any:
        """Query ``contract`` with this message, validated against ``response_model`` if given"""
        return client.query_contract(contract, self, response_model)
