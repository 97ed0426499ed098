"""Quickstart: bind classes and let the container wire their constructors.

Constructor dependencies are read from type hints. Resolve only the
top-level service and the container builds the rest of the chain.
"""

from __future__ import annotations

from cosmos_ioc import Container


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    container = Container()
    container.bind(Database, Database)
    container.bind(UserRepository, UserRepository)
    container.bind(UserService, UserService)

    service = container.make(UserService)

    print(f"db_host={service.repository.database.host}")  # => db_host=localhost

    chain = (
        f"{type(service).__name__}"
        f">{type(service.repository).__name__}"
        f">{type(service.repository.database).__name__}"
    )
    print(f"chain={chain}")  # => chain=UserService>UserRepository>Database
    print(f"transient={container.make(UserService) is not service}")  # => transient=True


if __name__ == "__main__":
    main()
