"""Tokens, explicit dependencies and capability tags.

A ``Token`` is an identifier nobody else can recreate by accident. Explicit
dependencies replace type-hint inference, and ``satisfies`` lets a binding
stand in for an abstraction.
"""

from __future__ import annotations

from typing import Annotated, Protocol

from cosmos_ioc import Container, Inject, Token

PAYMENT_GATEWAY = Token("PAYMENT_GATEWAY")


class Gateway(Protocol):
    def charge(self, amount: int) -> str: ...


class StripeGateway:
    def charge(self, amount: int) -> str:
        return f"stripe:{amount}"


class CheckoutService:
    def __init__(self, gateway: Annotated[Gateway, Inject(PAYMENT_GATEWAY)]) -> None:
        self.gateway = gateway


def build_invoice(gateway, currency) -> str:  # noqa: ANN001
    return f"{gateway.charge(10)} {currency}"


def main() -> None:
    container = Container()
    container.singleton(PAYMENT_GATEWAY, StripeGateway, satisfies=[Gateway])
    container.instance("currency", "EUR")
    container.bind(CheckoutService, CheckoutService)
    container.bind(
        "invoice",
        build_invoice,
        dependencies={"gateway": PAYMENT_GATEWAY, "currency": "currency"},
    )

    checkout = container.make(CheckoutService)
    print(f"charge={checkout.gateway.charge(5)}")  # => charge=stripe:5
    print(f"token={PAYMENT_GATEWAY!r}")  # => token=Token('PAYMENT_GATEWAY')
    print(f"distinct={Token('PAYMENT_GATEWAY') != PAYMENT_GATEWAY}")  # => distinct=True

    print(f"invoice={container.make('invoice')}")  # => invoice=stripe:10 EUR

    print(f"has_gateway={container.has(Gateway)}")  # => has_gateway=True
    print(f"same_gateway={container.make(Gateway) is checkout.gateway}")  # => same_gateway=True


if __name__ == "__main__":
    main()
