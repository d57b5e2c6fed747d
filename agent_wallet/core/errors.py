"""
Wallet error taxonomy.

Every failure surfaced by the wallet core is a ``WalletError`` carrying an
``ErrorContext`` (category, chain, step, recoverability). Validation errors
are raised before any network call; provider and node failures are wrapped
where they happen and re-raised with the step and chain attached.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of wallet errors."""

    VALIDATION = "validation"              # Malformed caller input
    CONFIGURATION = "configuration"        # Unknown chain, missing signer
    AUTHENTICATION = "authentication"      # Bad secret key
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PROVIDER = "provider"                  # Aggregator reported a problem
    NETWORK = "network"                    # RPC / transport failure
    EXECUTION = "execution"                # Route execution failed


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory
    recoverable: bool = False
    chain: Optional[str] = None
    step: Optional[str] = None
    provider: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class WalletError(Exception):
    """Base class for all wallet failures."""

    category: ErrorCategory = ErrorCategory.EXECUTION

    def __init__(
        self,
        message: str,
        *,
        chain: Optional[str] = None,
        step: Optional[str] = None,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(
            category=self.category,
            recoverable=False,
            chain=chain,
            step=step,
            provider=provider,
            details=details or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": type(self).__name__,
            "category": self.category.value,
            "message": self.message,
        }
        if self.context.chain:
            payload["chain"] = self.context.chain
        if self.context.step:
            payload["step"] = self.context.step
        if self.context.details:
            payload["details"] = self.context.details
        return payload


class InvalidParameter(WalletError):
    """Caller supplied malformed or missing input."""

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        if field_name:
            self.context.details.setdefault("field", field_name)


class UnknownChain(WalletError):
    """Chain identifier is not configured."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, chain: Any, message: Optional[str] = None):
        super().__init__(message or f"Unknown chain: {chain!r}", chain=str(chain))
        self.chain = chain


class NotConnected(WalletError):
    """No signing client is available for the requested operation."""

    category = ErrorCategory.CONFIGURATION


class InvalidCredential(WalletError):
    """The secret key could not be turned into an account."""

    category = ErrorCategory.AUTHENTICATION

    def __init__(self, message: str = "Invalid private key"):
        super().__init__(message)


class InsufficientBalance(WalletError):
    """Local pre-flight balance check failed."""

    category = ErrorCategory.INSUFFICIENT_FUNDS

    def __init__(
        self,
        *,
        required: int,
        available: Optional[int],
        chain: Optional[str] = None,
        symbol: str = "",
    ):
        shown = "unknown" if available is None else str(available)
        super().__init__(
            f"Insufficient balance on {chain}: required {required}, available {shown} {symbol}".strip(),
            chain=chain,
            step="balance_check",
            details={"required": str(required), "available": None if available is None else str(available)},
        )
        self.required = required
        self.available = available


class AggregatorError(WalletError):
    """The route aggregation service rejected a request or was unreachable."""

    category = ErrorCategory.PROVIDER

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None, **kwargs: Any):
        kwargs.setdefault("provider", "lifi")
        details = kwargs.pop("details", None) or {}
        if status_code is not None:
            details["status_code"] = status_code
        if body:
            details["body"] = body[:500]
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code
        self.body = body


class NoRouteFound(AggregatorError):
    """Aggregator returned an empty route set."""

    def __init__(self, message: str = "No routes found", **kwargs: Any):
        super().__init__(message, **kwargs)


class ExecutionFailed(WalletError):
    """Route execution reported a failed process."""

    category = ErrorCategory.EXECUTION

    def __init__(self, status: Optional[str], detail: Optional[str] = None, **kwargs: Any):
        message = f"Route execution failed. Status: {status}"
        if detail:
            message = f"{message}, Error: {detail}"
        super().__init__(message, **kwargs)
        self.status = status
        self.detail = detail


class RpcError(WalletError):
    """A node call failed outside the transfer pipeline (e.g. a token read)."""

    category = ErrorCategory.NETWORK


class TransferFailed(RpcError):
    """An RPC step of a direct transfer failed."""

    def __init__(self, cause: BaseException | str, *, step: str, chain: Optional[str] = None):
        cause_text = str(cause) or type(cause).__name__
        super().__init__(
            f"Transfer failed during {step}: {cause_text}",
            chain=chain,
            step=step,
            details={"cause": cause_text},
        )
        self.cause = cause
