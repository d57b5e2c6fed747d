"""Service layer helpers"""

from .tokens import TokenService
from .wallet_agent import WalletAgent, close_wallet_agent, get_wallet_agent, set_wallet_agent

__all__ = [
    "TokenService",
    "WalletAgent",
    "close_wallet_agent",
    "get_wallet_agent",
    "set_wallet_agent",
]
