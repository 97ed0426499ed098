"""Autowiring concrete classes and pydantic-settings models.

With ``autowire_concrete_types=True`` unregistered classes are bound the
first time something needs them. Settings models are shared and read from
the environment once.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from cosmos_ioc import Container


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APP_")

    dsn: str = "sqlite://"


class Database:
    def __init__(self, settings: DatabaseSettings) -> None:
        self.dsn = settings.dsn


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


def main() -> None:
    os.environ["APP_DSN"] = "postgresql://localhost/app"
    container = Container(autowire_concrete_types=True)

    repository = container.make(UserRepository)
    print(f"dsn={repository.database.dsn}")  # => dsn=postgresql://localhost/app

    settings_shared = container.make(DatabaseSettings) is container.make(DatabaseSettings)
    print(f"settings_shared={settings_shared}")  # => settings_shared=True
    print(f"repository_shared={container.is_shared(UserRepository)}")  # => repository_shared=False
    print(f"registered={container.has(Database)}")  # => registered=True


if __name__ == "__main__":
    main()
