"""Async client for the LI.FI routing API."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.errors import AggregatorError


DEFAULT_LIFI_BASE_URL = "https://li.quest/v1"


class LiFiProvider:
    """Thin wrapper around the https://li.quest/v1 endpoints the wallet drives.

    Only route discovery, step transaction population and transfer status are
    used; route finding itself happens on the LI.FI side.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        integrator: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        configured = (
            base_url
            or settings.lifi_base_url
            or os.environ.get("LIFI_BASE_URL", "")
        )
        self.base_url = (configured or DEFAULT_LIFI_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.lifi_api_key
        self.integrator = integrator or settings.lifi_integrator
        self.timeout_s = timeout_s or settings.lifi_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": "AgentWalletLiFiClient/2025-01",
        }
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, params=params, headers=self._headers())
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text
            raise AggregatorError(
                f"LI.FI {path} returned {exc.response.status_code}: {_error_message(exc.response) or body[:200]}",
                status_code=exc.response.status_code,
                body=body,
                step=path.strip("/"),
            ) from exc
        except httpx.RequestError as exc:
            raise AggregatorError(f"LI.FI {path} request failed: {exc}", step=path.strip("/")) from exc
        except ValueError as exc:
            raise AggregatorError(f"LI.FI {path} returned invalid JSON: {exc}", step=path.strip("/")) from exc

    async def get_routes(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Request candidate routes.

        ``payload`` follows the ``/advanced/routes`` schema (fromChainId,
        toChainId, fromTokenAddress, toTokenAddress, fromAmount, fromAddress,
        options). The integrator is filled in when missing.
        """
        body = dict(payload)
        options = dict(body.get("options") or {})
        options.setdefault("integrator", self.integrator)
        body["options"] = options

        data = await self._request("POST", "/advanced/routes", json=body)
        routes = data.get("routes") if isinstance(data, dict) else None
        if routes is None:
            raise AggregatorError("LI.FI routes response has no 'routes' field", body=str(data)[:500])
        return list(routes)

    async def get_step_transaction(self, step: Dict[str, Any]) -> Dict[str, Any]:
        """Populate ``transactionRequest`` (and a fresh estimate) for one route step."""
        data = await self._request("POST", "/advanced/stepTransaction", json=step)
        if not isinstance(data, dict) or not data.get("transactionRequest"):
            raise AggregatorError(
                "LI.FI step transaction response has no transactionRequest",
                body=str(data)[:500],
                step="advanced/stepTransaction",
            )
        return data

    async def get_status(
        self,
        tx_hash: str,
        *,
        bridge: Optional[str] = None,
        from_chain: Optional[int] = None,
        to_chain: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Status of a transfer (``DONE``, ``PENDING``, ``FAILED``, ``NOT_FOUND``)."""
        params: Dict[str, Any] = {"txHash": tx_hash}
        if bridge:
            params["bridge"] = bridge
        if from_chain is not None:
            params["fromChain"] = from_chain
        if to_chain is not None:
            params["toChain"] = to_chain
        return await self._request("GET", "/status", params=params)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        return str(message) if message else None
    return None


_provider: Optional[LiFiProvider] = None


def get_lifi_provider() -> LiFiProvider:
    """Get the shared LI.FI provider instance."""
    global _provider
    if _provider is None:
        _provider = LiFiProvider()
    return _provider
