"""
Data models for daemon responses and deployed contracts.
"""
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _DaemonModel(BaseModel):
    """Base for daemon responses; unknown fields are ignored"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class NetContract(BaseModel):
    """A deployed contract instance"""
    label: str = ""
    id: str = ""
    address: str = ""
    code_hash: str = ""

    @property
    def is_resolved(self) -> bool:
        """True once the code id, address and code hash are all known"""
        return bool(self.id and self.address and self.code_hash)


class TxResponse(_DaemonModel):
    """Result of broadcasting a transaction"""
    txhash: str
    height: Optional[str] = None
    code: Optional[int] = None
    codespace: Optional[str] = None
    raw_log: str = ""
    gas_wanted: Optional[str] = None
    gas_used: Optional[str] = None


class Attribute(_DaemonModel):
    msg_key: str = Field("", alias="key")
    value: str = ""


class Event(_DaemonModel):
    type: str = ""
    attributes: List[Attribute] = Field(default_factory=list)


class Log(_DaemonModel):
    msg_index: Optional[int] = None
    log: str = ""
    events: List[Event] = Field(default_factory=list)


class TxQuery(_DaemonModel):
    """Full on-chain result of a transaction, fetched by hash"""
    txhash: str
    height: Optional[str] = None
    code: Optional[int] = None
    raw_log: str = ""
    logs: List[Log] = Field(default_factory=list)
    gas_wanted: Optional[str] = None
    gas_used: Optional[str] = None


class TxCompute(BaseModel):
    """Decrypted execution result from ``q compute tx``"""
    model_config = ConfigDict(extra="allow")

    input: Optional[str] = ""
    output_data: Optional[str] = ""
    output_data_as_string: Optional[str] = ""
    output_logs: Optional[List[Dict[str, Any]]] = None
    output_error: Any = None
    plaintext_error: Optional[str] = ""


class ListCodeResponse(_DaemonModel):
    """Entry in the list of stored contract codes"""
    id: int = Field(..., validation_alias=AliasChoices("id", "code_id"))
    creator: str = ""
    data_hash: str = Field("", validation_alias=AliasChoices("data_hash", "code_hash"))
    source: str = ""
    builder: str = ""


class ListContractCode(_DaemonModel):
    """Contract instantiated from a given code id"""
    code_id: int
    creator: str = ""
    label: str = ""
    address: str = Field("", validation_alias=AliasChoices("address", "contract_address"))


class PubKey(_DaemonModel):
    type: str = ""
    value: str = ""


class SignedTx(_DaemonModel):
    """Signed document returned by ``tx sign-doc``"""
    pub_key: PubKey
    signature: str


class CacheLookup(BaseModel):
    """Outcome of looking up a contract in the cache"""
    hit: bool
    name: Optional[str] = None
    contract: Optional[NetContract] = None
