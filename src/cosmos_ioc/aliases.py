from __future__ import annotations

from cosmos_ioc.exceptions import CosmosAliasCycleError, CosmosDuplicateAliasError
from cosmos_ioc.identifiers import Identifier


class AliasesRegistry:
    """Maps alternate names to the identifiers they stand for.

    Alias targets may be aliases themselves. ``resolve`` follows the chain to
    the first identifier without an outgoing alias. Edges that would close a
    loop are rejected, so every chain terminates.
    """

    def __init__(self) -> None:
        self._aliases: dict[Identifier, Identifier] = {}

    def add(self, identifier: Identifier, alias: Identifier) -> None:
        """Record ``alias -> identifier``.

        The caller checks that ``identifier`` is known to the container.

        Raises:
            CosmosDuplicateAliasError: If ``alias`` is already an alias.
            CosmosAliasCycleError: If ``identifier`` resolves back to ``alias``.

        """
        if alias in self._aliases:
            raise CosmosDuplicateAliasError(alias)
        if self.resolve(identifier) == alias:
            raise CosmosAliasCycleError(identifier, alias)
        self._aliases[alias] = identifier

    def resolve(self, identifier: Identifier) -> Identifier:
        """Follow the alias chain of ``identifier`` to its terminal identifier."""
        while identifier in self._aliases:
            identifier = self._aliases[identifier]
        return identifier

    def clear(self) -> None:
        """Remove every alias."""
        self._aliases.clear()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)
