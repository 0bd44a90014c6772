"""
Data models for the SiHiRi SDK.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field

# Current metadata document schema version written by this SDK
SCHEMA_VERSION = 1

# Attribution license applied when the creator does not choose one
DEFAULT_LICENSE = "CC-BY-4.0"


class NetworkName(str, Enum):
    """Stacks networks the SDK can target"""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    LOCAL = "local"


class MediaType(str, Enum):
    """Kind of creative work referenced by an NFT"""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    THREE_D = "3d"
    OTHER = "other"


class NetworkProfile(BaseModel):
    """Connection details for one Stacks network"""
    name: NetworkName
    api_url: str = Field(..., alias="apiUrl")
    explorer_url: str = Field(..., alias="explorerUrl")
    network_id: int = Field(..., alias="networkId")

    @property
    def is_mainnet(self) -> bool:
        return self.name == NetworkName.MAINNET

    class Config:
        populate_by_name = True
        frozen = True


class ContractReference(BaseModel):
    """A deployed contract resolved from its logical name"""
    logical_name: str
    address: str
    on_chain_name: str

    @property
    def contract_id(self) -> str:
        return f"{self.address}.{self.on_chain_name}"

    class Config:
        frozen = True


class BroadcastReceipt(BaseModel):
    """
    Result of broadcasting a signed transaction.

    A receipt only says the node accepted the transaction into its mempool;
    it says nothing about inclusion in a block.
    """
    tx_id: str = Field(..., alias="txId")
    tx_raw: Optional[str] = Field(None, alias="txRaw")
    contract_id: str
    function_name: str
    network: NetworkName

    class Config:
        populate_by_name = True
        frozen = True


class MirrorReceipt(BaseModel):
    """Result of replicating content to permanent storage"""
    tx_id: str
    primary_cid: str
    url: str

    class Config:
        frozen = True


class Attribute(BaseModel):
    """A single trait of an NFT"""
    trait: str = Field(..., alias="trait_type")
    value: Any

    class Config:
        populate_by_name = True
        frozen = True


class NFTMetadata(BaseModel):
    """
    Canonical NFT metadata document.

    Documents are immutable once stored; editing one means writing a new
    document under a new content identifier.
    """
    name: str
    description: str
    image: str
    animation_url: Optional[str] = None
    media_type: MediaType
    attributes: List[Attribute] = Field(default_factory=list)
    creator: str
    license: str = DEFAULT_LICENSE
    # absent from documents written before timestamps were recorded
    created_at: Optional[datetime] = None
    schema_version: int = Field(SCHEMA_VERSION, alias="version")
    media_specific: Optional[Dict[str, Any]] = None
    components: Optional[List[Dict[str, Any]]] = None

    def to_document(self) -> Dict[str, Any]:
        """Render the JSON document exactly as it is stored"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    class Config:
        populate_by_name = True
        frozen = True
