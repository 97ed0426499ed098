"""Common error classes for troubleshooting.

This module triggers representative error paths and prints exception type
names and messages so you can recognize each error category quickly.
"""

from __future__ import annotations

from cosmos_ioc import (
    Container,
    CosmosCircularDependencyError,
    CosmosDependencyInferenceError,
    CosmosDuplicateBindingError,
    CosmosError,
    CosmosUnresolvedDependencyError,
)


class Mailer:
    pass


class SignupService:
    def __init__(self, mailer: Mailer) -> None:
        self.mailer = mailer


class UntypedService:
    def __init__(self, mailer) -> None:  # noqa: ANN001
        self.mailer = mailer


def main() -> None:
    container = Container()
    container.bind("mailer", Mailer)
    try:
        container.bind("mailer", Mailer)
    except CosmosDuplicateBindingError as error:
        print(f"duplicate={error}")  # => duplicate=Identifier 'mailer' is already bound.

    container.bind(SignupService, SignupService)
    try:
        container.make(SignupService)
    except CosmosUnresolvedDependencyError as error:
        missing = type(error).__name__
        print(f"missing={missing}")  # => missing=CosmosUnresolvedDependencyError
        print(f"detail={error}")  # => detail=Dependency Mailer is not bound in the container (required by SignupService).

    container.bind("a", lambda b: b, dependencies=["b"])
    container.bind("b", lambda a: a, dependencies=["a"])
    try:
        container.make("a")
    except CosmosCircularDependencyError as error:
        print(f"cycle={error}")  # => cycle=Circular dependency detected: 'a' -> 'b' -> 'a'

    try:
        container.make(UntypedService)
    except CosmosDependencyInferenceError as error:
        inference = type(error).__name__
    print(f"inference={inference}")  # => inference=CosmosDependencyInferenceError

    print(f"base={issubclass(CosmosUnresolvedDependencyError, CosmosError)}")  # => base=True


if __name__ == "__main__":
    main()
