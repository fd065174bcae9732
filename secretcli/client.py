"""
SecretCLI - typed wrappers over the daemon's compute and signing commands.
"""
import logging
from pathlib import Path
from typing import Any, List, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .config import CLIConfig
from .exceptions import DeserializationError
from .models import (
    ListCodeResponse,
    ListContractCode,
    NetContract,
    SignedTx,
    TxCompute,
    TxQuery,
    TxResponse,
)
from .runner import CommandRunner
from .utils import serialize_message, trim_newline

T = TypeVar('T')

DEFAULT_USER = "a"
DEFAULT_STORE_GAS = "10000000"
DEFAULT_INIT_GAS = "10000000"
DEFAULT_EXEC_GAS = "800000"


def store_args(
    contract_path: str,
    user: Optional[str] = None,
    gas: Optional[str] = None,
    backend: Optional[str] = None
) -> List[str]:
    """Build the argument list for ``tx compute store``"""
    args = [
        "tx", "compute", "store", contract_path,
        "--from", user or DEFAULT_USER,
        "--gas", gas or DEFAULT_STORE_GAS,
    ]
    if backend:
        args += ["--keyring-backend", backend]
    args.append("-y")
    return args


def instantiate_args(
    code_id: str,
    message: str,
    label: str,
    sender: str,
    gas: Optional[str] = None,
    backend: Optional[str] = None
) -> List[str]:
    """Build the argument list for ``tx compute instantiate``"""
    args = [
        "tx", "compute", "instantiate", code_id, message,
        "--from", sender,
        "--label", label,
        "--gas", gas or DEFAULT_INIT_GAS,
    ]
    if backend:
        args += ["--keyring-backend", backend]
    args.append("-y")
    return args


def execute_args(
    address: str,
    message: str,
    sender: str,
    gas: Optional[str] = None,
    backend: Optional[str] = None,
    amount: Optional[str] = None
) -> List[str]:
    """Build the argument list for ``tx compute execute``"""
    args = [
        "tx", "compute", "execute", address, message,
        "--from", sender,
        "--gas", gas or DEFAULT_EXEC_GAS,
    ]
    if backend:
        args += ["--keyring-backend", backend]
    if amount:
        args += ["--amount", amount]
    args.append("-y")
    return args


def query_args(address: str, message: str) -> List[str]:
    """Build the argument list for ``query compute query``"""
    return ["query", "compute", "query", address, message]


class SecretCLI:
    """
    Client for driving ``secretd`` from test scripts.

    Every method runs one daemon command (with the runner's retry loop)
    and returns the parsed response model.
    """

    def __init__(
        self,
        config: Optional[CLIConfig] = None,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client

        Args:
            config: Client settings (defaults to ``CLIConfig.from_env()``)
            runner: Command runner to use (built from config if omitted)
            logger: Optional logger instance to use for debug/info logging
        """
        self.config = config or (runner.config if runner else CLIConfig.from_env())
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(self.config, logger=self.logger)

    def _parse(self, data: Any, response_type: Type[T]) -> T:
        try:
            return TypeAdapter(response_type).validate_python(data)
        except ValidationError as e:
            name = getattr(response_type, "__name__", str(response_type))
            self.logger.error(f"Daemon response does not match {name}: {e}")
            raise DeserializationError(
                f"Daemon response does not match {name}: {e}",
                raw_output=repr(data)
            ) from e

    def _run(self, args: List[str], response_type: Type[T]) -> T:
        return self._parse(self.runner.run_json(args), response_type)

    def store_contract(
        self,
        contract_path: str,
        user: Optional[str] = None,
        gas: Optional[str] = None,
        backend: Optional[str] = None
    ) -> TxResponse:
        """
        Store contract bytecode on chain

        Args:
            contract_path: Path to the compiled (optionally gzipped) wasm file
            user: Key that signs the tx (default "a")
            gas: Gas limit (default "10000000")
            backend: Keyring backend, omitted from the command if None

        Returns:
            Broadcast response carrying the tx hash
        """
        response = self._run(store_args(contract_path, user, gas, backend), TxResponse)
        self.logger.info(f"Store transaction sent: {response.txhash}")
        return response

    def instantiate_contract(
        self,
        contract: NetContract,
        init_message: Any,
        label: str,
        sender: str,
        gas: Optional[str] = None,
        backend: Optional[str] = None
    ) -> TxResponse:
        """
        Instantiate a stored contract

        Args:
            contract: Contract whose ``id`` is the code id to instantiate
            init_message: Instantiate message (model or JSON-serializable value)
            label: Unique contract label
            sender: Key that signs the tx
            gas: Gas limit (default "10000000")
            backend: Keyring backend, omitted from the command if None

        Returns:
            Broadcast response carrying the tx hash
        """
        message = serialize_message(init_message)
        response = self._run(
            instantiate_args(contract.id, message, label, sender, gas, backend),
            TxResponse
        )
        self.logger.info(f"Instantiate transaction sent: {response.txhash}")
        return response

    def execute_contract(
        self,
        contract: NetContract,
        exec_message: Any,
        sender: str,
        gas: Optional[str] = None,
        backend: Optional[str] = None,
        amount: Optional[str] = None
    ) -> TxResponse:
        """
        Execute a message on an instantiated contract

        Args:
            contract: Contract whose ``address`` receives the message
            exec_message: Execute message (model or JSON-serializable value)
            sender: Key that signs the tx
            gas: Gas limit (default "800000")
            backend: Keyring backend, omitted from the command if None
            amount: Native tokens to send along (e.g. "100uscrt")

        Returns:
            Broadcast response carrying the tx hash
        """
        message = serialize_message(exec_message)
        response = self._run(
            execute_args(contract.address, message, sender, gas, backend, amount),
            TxResponse
        )
        self.logger.info(f"Execute transaction sent: {response.txhash}")
        return response

    def query_contract(
        self,
        contract: NetContract,
        query_message: Any,
        response_model: Optional[Type[T]] = None
    ) -> Any:
        """
        Run a smart query against a contract

        Args:
            contract: Contract to query
            query_message: Query message (model or JSON-serializable value)
            response_model: Type to validate the answer against; the raw
                decoded JSON is returned when omitted

        Returns:
            The query answer
        """
        data = self.runner.run_json(query_args(contract.address, serialize_message(query_message)))
        if response_model is None:
            return data
        return self._parse(data, response_model)

    def query_hash(self, tx_hash: str) -> TxQuery:
        """Fetch the full on-chain result of a transaction"""
        return self._run(["q", "tx", tx_hash], TxQuery)

    def compute_hash(self, tx_hash: str) -> TxCompute:
        """Fetch the decrypted compute result of a transaction"""
        return self._run(["q", "compute", "tx", tx_hash], TxCompute)

    def list_code(self) -> List[ListCodeResponse]:
        """List every stored contract code"""
        return self._run(["query", "compute", "list-code"], Optional[List[ListCodeResponse]]) or []

    def list_contracts_by_code(self, code_id: str) -> List[ListContractCode]:
        """List contracts instantiated from a code id"""
        return self._run(
            ["query", "compute", "list-contract-by-code", str(code_id)],
            Optional[List[ListContractCode]]
        ) or []

    def account_address(self, key_name: str) -> str:
        """
        Resolve a keyring key name to its account address

        Args:
            key_name: Name of the key in the daemon's keyring

        Returns:
            The bech32 address with the trailing newline removed
        """
        return trim_newline(self.runner.run_raw(["keys", "show", "-a", key_name]))

    def create_permit(self, document: Any, signer: str) -> SignedTx:
        """
        Sign an arbitrary document, e.g. a query permit

        The document is written to the configured signing file in the
        working directory, which is removed once the daemon has run.

        Args:
            document: Document to sign (model or JSON-serializable value)
            signer: Key that signs the document

        Returns:
            The signature and public key
        """
        message = serialize_message(document)
        sign_file = Path(self.config.sign_file)
        sign_file.write_text(message, encoding="utf-8")
        try:
            return self._run(["tx", "sign-doc", self.config.sign_file, "--from", signer], SignedTx)
        finally:
            sign_file.unlink(missing_ok=True)
