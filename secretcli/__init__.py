"""
secretcli - drive the secretd CLI from contract test scripts.
"""
from .version import __version__
from .config import CLIConfig
from .exceptions import (
    SecretCLIError,
    DaemonError,
    DaemonNotFoundError,
    DeserializationError,
    MessageSerializationError,
    NoCachedContractError,
    ContractNotCachedError,
)
from .models import (
    Attribute,
    CacheLookup,
    Event,
    ListCodeResponse,
    ListContractCode,
    Log,
    NetContract,
    PubKey,
    SignedTx,
    TxCompute,
    TxQuery,
    TxResponse,
)
from .runner import CommandRunner
from .client import SecretCLI, execute_args, instantiate_args, query_args, store_args
from .cache import ContractCache, load_cached_contract, save_contract
from .harness import (
    HandleMsg,
    InitMsg,
    QueryMsg,
    deploy_contract,
    handle_contract,
    init_contract,
    store_and_instantiate,
)

__all__ = [
    "__version__",
    "CLIConfig",
    # Errors
    "SecretCLIError",
    "DaemonError",
    "DaemonNotFoundError",
    "DeserializationError",
    "MessageSerializationError",
    "NoCachedContractError",
    "ContractNotCachedError",
    # Models
    "Attribute",
    "CacheLookup",
    "Event",
    "ListCodeResponse",
    "ListContractCode",
    "Log",
    "NetContract",
    "PubKey",
    "SignedTx",
    "TxCompute",
    "TxQuery",
    "TxResponse",
    # Client
    "CommandRunner",
    "SecretCLI",
    "store_args",
    "instantiate_args",
    "execute_args",
    "query_args",
    # Cache
    "ContractCache",
    "load_cached_contract",
    "save_contract",
    # Harness
    "InitMsg",
    "HandleMsg",
    "QueryMsg",
    "init_contract",
    "store_and_instantiate",
    "deploy_contract",
    "handle_contract",
]
