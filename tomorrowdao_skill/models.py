"""
Data models for the TomorrowDAO skill.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecutionMode(str, Enum):
    """How a contract write is executed"""
    SIMULATE = "simulate"
    SEND = "send"


class ChainEndpoint(BaseModel):
    """A configured chain and the node serving it"""
    chain_id: str = Field(..., alias="chainId")
    rpc_url: str = Field(..., alias="rpcUrl")

    model_config = ConfigDict(populate_by_name=True)


class ContractCallRequest(BaseModel):
    """One desired contract invocation"""
    chain_id: str = Field(..., alias="chainId")
    contract_address: str = Field(..., alias="contractAddress")
    method_name: str = Field(..., alias="methodName")
    args: Any = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ChainSimulatePayload(BaseModel):
    """Preview returned instead of broadcasting in simulate mode"""
    chain_id: str = Field(..., alias="chainId")
    contract_address: str = Field(..., alias="contractAddress")
    method_name: str = Field(..., alias="methodName")
    args: Any = None

    model_config = ConfigDict(populate_by_name=True)


class TxReceipt(BaseModel):
    """Receipt of a broadcast transaction"""
    tx_id: str = Field(..., alias="txId")
    status: str
    logs: Optional[List[Any]] = None
    explorer_url: Optional[str] = Field(None, alias="explorerUrl")

    model_config = ConfigDict(populate_by_name=True)


class TxResult(BaseModel):
    """Terminal transaction status observed on the node"""
    status: str
    raw: Any = None


class SendResult(BaseModel):
    """Outcome of a contract write, simulated or broadcast"""
    simulated: bool
    result: Any = None
    tx: Optional[TxReceipt] = None


class AuthToken(BaseModel):
    """Bearer token issued by the TomorrowDAO auth server"""
    access_token: str = Field(..., alias="accessToken")
    token_type: str = Field("Bearer", alias="tokenType")
    expires_in: int = Field(..., alias="expiresIn")
    expires_at: int = Field(..., alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def __repr__(self) -> str:
        return (
            f"AuthToken(token_type={self.token_type!r}, expires_in={self.expires_in}, "
            f"expires_at={self.expires_at})"
        )

    __str__ = __repr__


class SignaturePayload(BaseModel):
    """Signed proof of key ownership used by the token exchange"""
    timestamp: int
    address: str
    public_key: str = Field(..., alias="publicKey")
    signature: str

    model_config = ConfigDict(populate_by_name=True)


class ToolError(BaseModel):
    """Machine-readable failure description"""
    code: str
    message: str
    details: Optional[Any] = None


class ToolResult(BaseModel):
    """Uniform envelope returned by every tool operation"""
    success: bool
    data: Optional[Any] = None
    error: Optional[ToolError] = None
    trace_id: Optional[str] = Field(None, alias="traceId")
    tx: Optional[TxReceipt] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """
        Wire representation with camelCase keys and unset fields omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
