"""Shared bindings, pre-built instances and flushing.

``singleton`` caches the first instance it builds. ``instance`` registers a
value that already exists. ``flush`` forgets everything.
"""

from __future__ import annotations

from cosmos_ioc import Container


class Config:
    def __init__(self, debug: bool) -> None:
        self.debug = debug


class Connection:
    pass


def main() -> None:
    container = Container()
    container.singleton("connection", Connection)
    container.bind("config", lambda: Config(debug=False))

    first = container.make("connection")
    print(f"same_connection={first is container.make('connection')}")  # => same_connection=True
    print(f"shared={container.is_shared('connection')}")  # => shared=True
    print(f"config_shared={container.is_shared('config')}")  # => config_shared=False

    container.instance("config", Config(debug=True))
    print(f"debug={container.make('config').debug}")  # => debug=True

    print(f"config_shared_now={container.is_shared('config')}")  # => config_shared_now=True

    with container:
        print(f"inside={container.has('connection')}")  # => inside=True
    print(f"after_flush={container.has('connection')}")  # => after_flush=False


if __name__ == "__main__":
    main()
