from typing import List, Optional
from pydantic import BaseModel, Field


class RawBalance(BaseModel):
    """One token contract held by a wallet, as reported by the indexer."""

    contract_address: str = Field(..., alias="contractAddress", description="Token contract address")
    token_balance_hex: str = Field(..., alias="tokenBalance", description="Raw balance as a hex string")

    class Config:
        populate_by_name = True


class TokenMetadata(BaseModel):
    decimals: Optional[int] = Field(default=None, description="Token decimal places")
    name: Optional[str] = Field(default=None, description="Full token name")
    symbol: Optional[str] = Field(default=None, description="Token symbol (e.g. USDC)")
    logo: Optional[str] = Field(default=None, description="Token logo URL")


class EnrichedToken(BaseModel):
    contract_address: str = Field(..., alias="contractAddress", description="Token contract address")
    token_balance_hex: str = Field(..., alias="tokenBalance", description="Raw balance as a hex string")
    decimals: Optional[int] = Field(default=None, description="Token decimal places")
    name: Optional[str] = Field(default=None, description="Full token name")
    symbol: Optional[str] = Field(default=None, description="Token symbol")
    logo: Optional[str] = Field(default=None, description="Token logo URL")
    balance: float = Field(..., ge=0, description="Human readable balance")
    usd_price: float = Field(default=0.0, alias="usdPrice", description="Price per token in USD (0 when unpriced)")
    usd_value: float = Field(default=0.0, alias="usdValue", description="Total value in USD")

    class Config:
        populate_by_name = True


class BalancesResponse(BaseModel):
    address: str = Field(description="Wallet address")
    chain: str = Field(description="Network the balances were read from")
    tokens: List[EnrichedToken] = Field(default_factory=list, description="Non-zero token holdings")


class ErrorResponse(BaseModel):
    error: str = Field(description="Error message")
