"""Contextual bindings: a different implementation for one consumer.

Every service asks for ``"logger"``. Only the payment service receives the
shared file logger; everybody else keeps the console logger.
"""

from __future__ import annotations

from typing import Annotated

from cosmos_ioc import Container, Inject


class Logger:
    name = "logger"


class ConsoleLogger(Logger):
    name = "console"


class FileLogger(Logger):
    name = "file"

    def __init__(self, filename: str) -> None:
        self.filename = filename


class PaymentService:
    def __init__(self, logger: Annotated[Logger, Inject("logger")]) -> None:
        self.logger = logger


class UserService:
    def __init__(self, logger: Annotated[Logger, Inject("logger")]) -> None:
        self.logger = logger


def main() -> None:
    container = Container()
    container.bind("logger", ConsoleLogger)
    container.singleton("file.logger", lambda: FileLogger("app.log"))
    container.alias("logger", "log")
    container.bind("payment.service", PaymentService)
    container.bind("user.service", UserService)

    container.when("payment.service").needs("logger").give("file.logger")

    payment_service = container.make("payment.service")
    user_service = container.make("user.service")

    print(f"payment={payment_service.logger.name}")  # => payment=file
    print(f"user={user_service.logger.name}")  # => user=console
    print(f"top_level={container.make('log').name}")  # => top_level=console
    print(
        f"shared_file_logger={payment_service.logger is container.make('file.logger')}",
    )  # => shared_file_logger=True

    override = container.get_contextual_concrete("logger", "payment.service")
    print(f"override={override}")  # => override=file.logger


if __name__ == "__main__":
    main()
