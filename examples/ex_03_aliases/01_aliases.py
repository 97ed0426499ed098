"""Aliases: several names for one binding.

An alias resolves exactly like its target, including shared instances.
Aliases can point at other aliases.
"""

from __future__ import annotations

from cosmos_ioc import Container, CosmosAliasCycleError, CosmosUnboundAliasTargetError


class ConsoleLogger:
    pass


def main() -> None:
    container = Container()
    container.singleton("logger", ConsoleLogger)
    container.alias("logger", "log")
    container.alias("log", "l")

    print(f"canonical={container.get_alias('l')}")  # => canonical=logger
    print(f"same={container.make('l') is container.make('logger')}")  # => same=True
    print(f"has_alias={container.has('log')}")  # => has_alias=True

    try:
        container.alias("l", "logger")
    except CosmosAliasCycleError as error:
        print(f"cycle={type(error).__name__}")  # => cycle=CosmosAliasCycleError

    try:
        container.alias("mailer", "mail")
    except CosmosUnboundAliasTargetError as error:
        print(f"unbound={type(error).__name__}")  # => unbound=CosmosUnboundAliasTargetError


if __name__ == "__main__":
    main()
