from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..core.chains.constants import NATIVE_PLACEHOLDER
from ..core.errors import ErrorCategory, UnknownChain, WalletError
from ..core.wallet.models import BridgeParams, SwapParams, TransferParams
from ..services.wallet_agent import WalletAgent, get_wallet_agent

router = APIRouter(prefix="/wallet")


_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.CONFIGURATION: 503,
    ErrorCategory.AUTHENTICATION: 503,
    ErrorCategory.INSUFFICIENT_FUNDS: 409,
    ErrorCategory.PROVIDER: 502,
    ErrorCategory.NETWORK: 502,
    ErrorCategory.EXECUTION: 502,
}


def to_http_exception(exc: WalletError) -> HTTPException:
    if isinstance(exc, UnknownChain):
        status_code = 404
    else:
        status_code = _STATUS_BY_CATEGORY.get(exc.category, 500)
    return HTTPException(status_code=status_code, detail=exc.to_dict())


def wallet_agent_dependency() -> WalletAgent:
    try:
        return get_wallet_agent()
    except WalletError as exc:
        raise to_http_exception(exc)


class TransferRequest(BaseModel):
    from_chain: str = Field(..., description="Chain key the transfer is sent on")
    to_address: str = Field(..., description="Recipient address")
    amount: str = Field(..., description="Decimal amount in whole units (e.g. '0.5')")
    data: Optional[str] = Field(default=None, description="Optional 0x-prefixed calldata")
    token: Optional[str] = Field(default=None, description="ERC20 contract; omit for the native currency")


class SwapRequest(BaseModel):
    chain: str = Field(..., description="Chain key the swap runs on")
    from_token: str = Field(..., description="Input token address (zero address for native)")
    to_token: str = Field(..., description="Output token address (zero address for native)")
    amount: str = Field(..., description="Decimal amount of the input token")
    slippage_bps: Optional[int] = Field(default=None, description="Allowed slippage in basis points (1-500)")


class BridgeRequest(BaseModel):
    from_chain: str
    to_chain: str
    amount: str
    from_token: str = Field(default=NATIVE_PLACEHOLDER)
    to_token: str = Field(default=NATIVE_PLACEHOLDER)
    to_address: Optional[str] = Field(default=None, description="Recipient on the destination chain; defaults to the wallet")


@router.get("")
async def wallet_info(agent: WalletAgent = Depends(wallet_agent_dependency)) -> Dict[str, Any]:
    registry = agent.session.registry
    return {
        "address": agent.get_address(),
        "currentChain": agent.current_chain,
        "chains": [
            {
                "key": descriptor.key,
                "chainId": descriptor.chain_id,
                "name": descriptor.name,
                "nativeCurrency": descriptor.native_currency.symbol,
            }
            for descriptor in registry.descriptors()
        ],
    }


@router.get("/balance")
async def wallet_balance(
    chain: Optional[str] = Query(default=None, description="Chain key; defaults to the current chain"),
    token: Optional[str] = Query(default=None, description="ERC20 contract; omit for the native currency"),
    agent: WalletAgent = Depends(wallet_agent_dependency),
) -> Dict[str, Any]:
    try:
        balance = await agent.get_token_balance(chain or agent.current_chain, token)
    except WalletError as exc:
        raise to_http_exception(exc)
    return {
        "chain": balance.chain,
        "address": balance.address,
        "token": balance.token,
        "symbol": balance.symbol,
        "decimals": balance.decimals,
        "raw": str(balance.raw),
        "formatted": balance.formatted,
    }


@router.get("/tokens/{chain}/{token}")
async def token_info(
    chain: str,
    token: str,
    agent: WalletAgent = Depends(wallet_agent_dependency),
) -> Dict[str, Any]:
    try:
        info = await agent.get_token_info(chain, token)
    except WalletError as exc:
        raise to_http_exception(exc)
    return {
        "chain": info.chain,
        "address": info.address,
        "name": info.name,
        "symbol": info.symbol,
        "decimals": info.decimals,
        "totalSupply": info.total_supply_formatted,
        "totalSupplyRaw": str(info.total_supply),
    }


@router.post("/transfer")
async def wallet_transfer(
    request: TransferRequest,
    agent: WalletAgent = Depends(wallet_agent_dependency),
) -> Dict[str, Any]:
    try:
        result = await agent.transfer(TransferParams(**request.model_dump()))
    except WalletError as exc:
        raise to_http_exception(exc)
    return {"success": True, "transaction": result.to_dict()}


@router.post("/swap")
async def wallet_swap(
    request: SwapRequest,
    agent: WalletAgent = Depends(wallet_agent_dependency),
) -> Dict[str, Any]:
    try:
        result = await agent.swap(SwapParams(**request.model_dump()))
    except WalletError as exc:
        raise to_http_exception(exc)
    return {"success": True, "transaction": result.to_dict()}


@router.post("/bridge")
async def wallet_bridge(
    request: BridgeRequest,
    agent: WalletAgent = Depends(wallet_agent_dependency),
) -> Dict[str, Any]:
    try:
        result = await agent.bridge(BridgeParams(**request.model_dump()))
    except WalletError as exc:
        raise to_http_exception(exc)
    return {"success": True, "transaction": result.to_dict()}
