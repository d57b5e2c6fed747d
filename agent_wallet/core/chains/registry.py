"""Chain registry built from the configured (or default) chain table."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set

from ..errors import InvalidParameter, UnknownChain
from .constants import DEFAULT_CHAIN_CONFIGS
from .models import ChainDescriptor


class ChainRegistry:
    """Immutable lookup of chain descriptors by key, alias, or numeric chain id.

    Usage:
        registry = ChainRegistry.from_config(settings.evm_chains)

        registry.resolve("base").chain_id      # 8453
        registry.by_chain_id(8453).key          # "base"
    """

    # Common alias patterns to generate from chain names
    ALIAS_EXPANSIONS = {
        "ethereum": ["eth", "mainnet", "l1"],
        "arbitrum": ["arb"],
        "optimism": ["op"],
        "polygon": ["matic"],
    }

    def __init__(
        self,
        descriptors: Mapping[str, ChainDescriptor],
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not descriptors:
            raise InvalidParameter("Chain table must contain at least one chain", field_name="chains")

        self._logger = logger or logging.getLogger(__name__)
        self._chains: Dict[str, ChainDescriptor] = dict(descriptors)
        self._by_id: Dict[int, str] = {}
        self._alias_to_key: Dict[str, str] = {}

        for key, descriptor in self._chains.items():
            if descriptor.chain_id in self._by_id:
                raise InvalidParameter(
                    f"Chain id {descriptor.chain_id} is configured twice "
                    f"({self._by_id[descriptor.chain_id]!r} and {key!r})",
                    field_name="chainId",
                )
            self._by_id[descriptor.chain_id] = key

        # Keys always win over generated aliases
        for key, descriptor in self._chains.items():
            for alias in self._generate_aliases(descriptor):
                if alias not in self._chains:
                    self._alias_to_key.setdefault(alias, key)
            self._alias_to_key[key.lower()] = key

    @classmethod
    def from_config(cls, overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> "ChainRegistry":
        """Load the configured chain table, falling back to the built-in defaults."""
        table = overrides or DEFAULT_CHAIN_CONFIGS
        descriptors: Dict[str, ChainDescriptor] = {}
        for key, data in table.items():
            try:
                descriptors[key] = ChainDescriptor.from_mapping(key, data)
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidParameter(
                    f"Invalid chain configuration for {key!r}: {exc}",
                    field_name=key,
                ) from exc

        registry = cls(descriptors)
        registry._logger.info(
            "Chain registry loaded: %d chains (%s)",
            len(descriptors),
            "override" if overrides else "defaults",
        )
        return registry

    def _generate_aliases(self, descriptor: ChainDescriptor) -> Set[str]:
        aliases: Set[str] = set()
        name = descriptor.name.lower().strip()
        if name:
            aliases.add(name)
            words = name.split()
            if len(words) > 1:
                aliases.add("".join(words))
        aliases.add(str(descriptor.chain_id))

        for base_name, expansions in self.ALIAS_EXPANSIONS.items():
            if descriptor.key == base_name or name == base_name:
                aliases.update(expansions)

        for alias in list(aliases):
            if alias.endswith(" mainnet"):
                aliases.add(alias[: -len(" mainnet")])

        aliases.discard("")
        return aliases

    # ─────────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────────

    def normalize(self, chain: str) -> str:
        """Return the canonical chain key for a key or alias."""
        if not isinstance(chain, str):
            raise UnknownChain(chain)
        key = self._alias_to_key.get(chain.lower().strip())
        if key is None:
            raise UnknownChain(chain)
        return key

    def resolve(self, chain: str) -> ChainDescriptor:
        return self._chains[self.normalize(chain)]

    def by_chain_id(self, chain_id: int) -> ChainDescriptor:
        key = self._by_id.get(chain_id)
        if key is None:
            raise UnknownChain(chain_id, f"Chain ID {chain_id} not supported")
        return self._chains[key]

    def get(self, chain: str) -> Optional[ChainDescriptor]:
        try:
            return self.resolve(chain)
        except UnknownChain:
            return None

    @property
    def keys(self) -> List[str]:
        return list(self._chains)

    def descriptors(self) -> List[ChainDescriptor]:
        return list(self._chains.values())

    def aggregator_chains(self) -> List[Dict[str, Any]]:
        return [descriptor.to_aggregator_chain() for descriptor in self._chains.values()]

    def __contains__(self, chain: object) -> bool:
        return isinstance(chain, str) and chain.lower().strip() in self._alias_to_key

    def __iter__(self) -> Iterator[ChainDescriptor]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)
