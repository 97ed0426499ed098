"""Tests for registration, queries and resolution on Container."""

from dataclasses import dataclass
from typing import Annotated

import pytest

from cosmos_ioc import Inject, Token
from cosmos_ioc.container import Container
from cosmos_ioc.exceptions import (
    CosmosDependencyInferenceError,
    CosmosDuplicateBindingError,
    CosmosInvalidRegistrationError,
    CosmosUnresolvedDependencyError,
)


class Logger:
    def log(self, message: str) -> str:
        return message


class ConsoleLogger(Logger):
    def log(self, message: str) -> str:
        return f"[ConsoleLogger] {message}"


class FileLogger(Logger):
    def __init__(self, filename: str) -> None:
        self.filename = filename

    def log(self, message: str) -> str:
        return f"[FileLogger] {self.filename}: {message}"


class UserService:
    def __init__(self, logger: Annotated[Logger, Inject("logger")]) -> None:
        self.logger = logger


class Database:
    pass


class Repository:
    def __init__(self, database: Database) -> None:
        self.database = database


class Settings:
    def __init__(self, retries: int = 3) -> None:
        self.retries = retries


class UntypedService:
    def __init__(self, dependency) -> None:  # type: ignore[no-untyped-def]
        self.dependency = dependency


@dataclass
class RepositoryFactory:
    table: str

    def __call__(self, database: Database) -> Repository:
        repository = Repository(database)
        repository.table = self.table  # type: ignore[attr-defined]
        return repository


class TestBind:
    def test_bind_registers_identifier(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)

        assert container.has("logger")
        assert not container.is_shared("logger")
        assert container.get_concrete("logger") is ConsoleLogger

    def test_second_bind_is_rejected_and_keeps_first_binding(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)

        with pytest.raises(CosmosDuplicateBindingError) as exc_info:
            container.bind("logger", FileLogger)

        assert exc_info.value.identifier == "logger"
        assert container.get_concrete("logger") is ConsoleLogger
        assert isinstance(container.make("logger"), ConsoleLogger)

    def test_second_singleton_is_rejected(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)

        with pytest.raises(CosmosDuplicateBindingError):
            container.singleton("logger", ConsoleLogger)

        assert not container.is_shared("logger")

    @pytest.mark.parametrize("identifier", [None, ["logger"], {"name": "logger"}])
    def test_bind_rejects_invalid_identifier(self, container: Container, identifier: object) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="hashable identifier"):
            container.bind(identifier, ConsoleLogger)

        assert not container.has("logger")

    def test_bind_rejects_unhashable_concrete(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="callable or a hashable"):
            container.bind("logger", [ConsoleLogger])

    def test_bind_rejects_unhashable_satisfies(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="satisfies"):
            container.bind("logger", ConsoleLogger, satisfies=[["Logger"]])

        assert not container.has("logger")

    def test_bind_rejects_string_satisfies(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="not a string"):
            container.bind("console", ConsoleLogger, satisfies="Logger")

        assert not container.has("console")
        assert not container.has("L")

    def test_bind_rejects_none_in_satisfies(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="satisfies"):
            container.bind("console", ConsoleLogger, satisfies=[None])

    def test_get_concrete_returns_identifier_when_unbound(self, container: Container) -> None:
        assert container.get_concrete("logger") == "logger"
        assert container.get_concrete(ConsoleLogger) is ConsoleLogger


class TestSingletonAndInstance:
    def test_singleton_is_shared(self, container: Container) -> None:
        container.singleton("file.logger", lambda: FileLogger("app.log"))

        assert container.is_shared("file.logger")

    def test_instance_is_shared_and_returned_as_is(self, container: Container) -> None:
        logger = ConsoleLogger()
        container.instance("logger", logger)

        assert container.has("logger")
        assert container.is_shared("logger")
        assert container.make("logger") is logger

    def test_instance_overwrites_cached_instance(self, container: Container) -> None:
        first = ConsoleLogger()
        second = ConsoleLogger()
        container.instance("logger", first)
        container.instance("logger", second)

        assert container.make("logger") is second

    def test_instance_takes_precedence_over_binding(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        logger = FileLogger("pre-built.log")
        container.instance("logger", logger)

        assert container.make("logger") is logger
        assert container.get_concrete("logger") is ConsoleLogger

    def test_instance_rejects_none_identifier(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError):
            container.instance(None, ConsoleLogger())


class TestHas:
    def test_unknown_identifier(self, container: Container) -> None:
        assert not container.has("logger")
        assert not container.has(Logger)

    def test_unhashable_identifier_is_unknown(self, container: Container) -> None:
        assert not container.has(["logger"])

    def test_alias_is_known(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.alias("logger", "log")

        assert container.has("log")

    def test_capability_tag_makes_abstraction_known(self, container: Container) -> None:
        container.bind("console", ConsoleLogger, satisfies=[Logger])

        assert container.has(Logger)
        assert not container.has(Database)

    def test_subclass_without_capability_tag_is_not_known(self, container: Container) -> None:
        container.bind("console", ConsoleLogger)

        assert not container.has(Logger)

    def test_name_and_token_capability_tags_are_known(self, container: Container) -> None:
        token = Token("LOGGER")
        container.bind("console", ConsoleLogger, satisfies=["logger", token])

        assert container.has("logger")
        assert container.has(token)
        assert not container.has(Token("LOGGER"))

    def test_kinds_do_not_collide(self, container: Container) -> None:
        token = Token("Logger")
        container.bind("Logger", ConsoleLogger)

        assert container.has("Logger")
        assert not container.has(token)
        assert not container.has(Logger)


class TestIsShared:
    def test_unbound_is_not_shared(self, container: Container) -> None:
        assert not container.is_shared("logger")

    def test_resolves_aliases(self, container: Container) -> None:
        container.singleton("file.logger", lambda: FileLogger("app.log"))
        container.alias("file.logger", "files")

        assert container.is_shared("files")


class TestMake:
    def test_transient_binding_builds_new_instances(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)

        first = container.make("logger")
        second = container.make("logger")

        assert isinstance(first, ConsoleLogger)
        assert isinstance(second, ConsoleLogger)
        assert first is not second

    def test_singleton_factory_is_built_once(self, container: Container) -> None:
        calls: list[int] = []

        def build_file_logger() -> FileLogger:
            calls.append(1)
            return FileLogger("app.log")

        container.singleton("file.logger", build_file_logger)

        first = container.make("file.logger")
        second = container.make("file.logger")

        assert first is second
        assert first.filename == "app.log"
        assert calls == [1]

    def test_explicit_arguments_are_passed_to_constructor(self, container: Container) -> None:
        container.bind("file.logger", FileLogger)

        logger = container.make("file.logger", "audit.log")

        assert logger.filename == "audit.log"

    def test_explicit_keyword_arguments_are_passed_to_factory(self, container: Container) -> None:
        container.bind("file.logger", lambda filename: FileLogger(filename))

        logger = container.make("file.logger", filename="audit.log")

        assert logger.filename == "audit.log"

    def test_unbound_class_is_built_directly(self, container: Container) -> None:
        assert isinstance(container.make(ConsoleLogger), ConsoleLogger)

    def test_unbound_name_is_unresolved(self, container: Container) -> None:
        with pytest.raises(CosmosUnresolvedDependencyError) as exc_info:
            container.make("logger")

        assert exc_info.value.dependency == "logger"
        assert exc_info.value.requested_by is None

    def test_constructor_dependencies_are_inferred(self, container: Container) -> None:
        database = Database()
        container.instance(Database, database)

        repository = container.make(Repository)

        assert repository.database is database

    def test_inject_marker_selects_named_dependency(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.bind("user.service", UserService)

        service = container.make("user.service")

        assert isinstance(service.logger, ConsoleLogger)

    def test_unbound_dependency_is_rejected(self, container: Container) -> None:
        container.bind("user.service", UserService)

        with pytest.raises(CosmosUnresolvedDependencyError) as exc_info:
            container.make("user.service")

        assert exc_info.value.dependency == "logger"
        assert exc_info.value.requested_by == "user.service"

    def test_unbound_class_dependency_is_rejected_without_autowiring(
        self,
        container: Container,
    ) -> None:
        with pytest.raises(CosmosUnresolvedDependencyError) as exc_info:
            container.make(Repository)

        assert exc_info.value.dependency is Database
        assert exc_info.value.requested_by is Repository

    def test_parameter_default_is_used_for_unbound_dependency(self, container: Container) -> None:
        settings = container.make(Settings)

        assert settings.retries == 3

    def test_bound_dependency_overrides_parameter_default(self, container: Container) -> None:
        container.instance(int, 7)

        settings = container.make(Settings)

        assert settings.retries == 7

    def test_required_parameter_without_annotation_fails(self, container: Container) -> None:
        with pytest.raises(CosmosDependencyInferenceError, match="dependency"):
            container.make(UntypedService)

    def test_explicit_positional_dependencies(self, container: Container) -> None:
        container.instance("db", Database())
        container.bind("service", UntypedService, dependencies=["db"])

        service = container.make("service")

        assert isinstance(service.dependency, Database)

    def test_explicit_named_dependencies(self, container: Container) -> None:
        container.instance("db", Database())
        container.bind("service", UntypedService, dependencies={"dependency": "db"})

        service = container.make("service")

        assert service.dependency is container.make("db")

    def test_explicit_dependencies_are_validated_against_signature(
        self,
        container: Container,
    ) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="do not match"):
            container.bind("service", UntypedService, dependencies=["db", "cache"])

        with pytest.raises(CosmosInvalidRegistrationError, match="do not match"):
            container.bind("service", UntypedService, dependencies={"unknown": "db"})

        assert not container.has("service")

    def test_explicit_dependencies_require_callable_concrete(self, container: Container) -> None:
        with pytest.raises(CosmosInvalidRegistrationError, match="callable concrete"):
            container.bind("service", "other.service", dependencies=["db"])

    def test_factory_dependencies_are_resolved_from_annotations(
        self,
        container: Container,
    ) -> None:
        container.singleton(Database, Database)

        def build_repository(database: Database) -> Repository:
            return Repository(database)

        container.bind("repository", build_repository)

        repository = container.make("repository")

        assert repository.database is container.make(Database)

    def test_identifier_bound_to_identifier_is_chained(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.bind("default.logger", "logger")

        assert isinstance(container.make("default.logger"), ConsoleLogger)

    def test_shared_identifier_chain_is_cached(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.singleton("default.logger", "logger")

        assert container.make("default.logger") is container.make("default.logger")
        assert container.make("logger") is not container.make("logger")

    def test_chain_to_unbound_identifier_is_unresolved(self, container: Container) -> None:
        container.bind("default.logger", "logger")

        with pytest.raises(CosmosUnresolvedDependencyError) as exc_info:
            container.make("default.logger")

        assert exc_info.value.dependency == "logger"
        assert exc_info.value.requested_by == "default.logger"

    def test_capability_tag_resolves_abstraction(self, container: Container) -> None:
        container.singleton("console", ConsoleLogger, satisfies=[Logger])

        assert container.make(Logger) is container.make("console")

    def test_token_identifiers(self, container: Container) -> None:
        gateway = Token("PAYMENT_GATEWAY")
        container.bind(gateway, ConsoleLogger)

        assert isinstance(container.make(gateway), ConsoleLogger)
        with pytest.raises(CosmosUnresolvedDependencyError):
            container.make(Token("PAYMENT_GATEWAY"))

    def test_factory_errors_propagate_and_nothing_is_cached(self, container: Container) -> None:
        attempts: list[int] = []

        def flaky() -> ConsoleLogger:
            attempts.append(1)
            if len(attempts) == 1:
                msg = "first attempt fails"
                raise RuntimeError(msg)
            return ConsoleLogger()

        container.singleton("logger", flaky)

        with pytest.raises(RuntimeError, match="first attempt fails"):
            container.make("logger")

        assert isinstance(container.make("logger"), ConsoleLogger)
        assert len(attempts) == 2

    def test_failed_dependency_does_not_cache_partial_instances(
        self,
        container: Container,
    ) -> None:
        container.singleton("repository", Repository, dependencies=["primary.database"])

        with pytest.raises(CosmosUnresolvedDependencyError) as exc_info:
            container.make("repository")

        assert exc_info.value.dependency == "primary.database"
        assert exc_info.value.requested_by == "repository"

        database = Database()
        container.instance("primary.database", database)
        repository = container.make("repository")

        assert repository.database is database
        assert container.make("repository") is repository

    def test_make_accepts_identifier_keyword_for_constructor(self, container: Container) -> None:
        class Named:
            def __init__(self, identifier: str) -> None:
                self.identifier = identifier

        container.bind("named", Named)

        assert container.make("named", identifier="x").identifier == "x"

    def test_unresolved_positional_only_default_keeps_its_slot(
        self,
        container: Container,
    ) -> None:
        def build(
            first: Database = "default-first",  # type: ignore[assignment]
            second: Annotated[str, Inject("second")] = "default-second",
            /,
        ) -> tuple[object, str]:
            return first, second

        container.instance("second", "resolved-second")
        container.bind("pair", build)

        assert container.make("pair") == ("default-first", "resolved-second")

    def test_unresolved_positional_only_defaults_are_all_kept(
        self,
        container: Container,
    ) -> None:
        def build(
            first: Database = "default-first",  # type: ignore[assignment]
            second: Annotated[str, Inject("second")] = "default-second",
            /,
        ) -> tuple[object, str]:
            return first, second

        container.bind("pair", build)

        assert container.make("pair") == ("default-first", "default-second")

    def test_unhashable_callable_concrete_is_built(self, container: Container) -> None:
        database = Database()
        container.instance(Database, database)
        container.bind("repository", RepositoryFactory(table="users"))

        first = container.make("repository")
        second = container.make("repository")

        assert first.database is database
        assert first.table == "users"
        assert first is not second

    def test_name_capability_tag_resolves_through_binding(self, container: Container) -> None:
        container.singleton("console", ConsoleLogger, satisfies=["logger"])
        container.bind("user.service", UserService)

        assert container.make("logger") is container.make("console")
        assert container.make("user.service").logger is container.make("console")


class TestAutowiring:
    def test_unbound_class_dependency_is_autowired(self, autowiring_container: Container) -> None:
        repository = autowiring_container.make(Repository)

        assert isinstance(repository.database, Database)
        assert autowiring_container.has(Database)
        assert not autowiring_container.is_shared(Database)

    def test_builtins_are_not_autowired(self, autowiring_container: Container) -> None:
        class NeedsText:
            def __init__(self, text: str) -> None:
                self.text = text

        with pytest.raises(CosmosUnresolvedDependencyError):
            autowiring_container.make(NeedsText)


class TestFlush:
    def test_flush_clears_everything(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.instance("config", {"debug": True})
        container.alias("logger", "log")
        container.add_contextual_binding("payment.service", "logger", "file.logger")

        container.flush()

        assert not container.has("logger")
        assert not container.has("config")
        assert not container.has("log")
        assert container.get_alias("log") == "log"
        assert not container.get_contextual_concrete("logger", "payment.service")

    def test_flush_allows_rebinding(self, container: Container) -> None:
        container.bind("logger", ConsoleLogger)
        container.flush()

        container.bind("logger", FileLogger)

        assert container.get_concrete("logger") is FileLogger

    def test_context_manager_flushes_on_exit(self) -> None:
        with Container() as container:
            container.bind("logger", ConsoleLogger)
            assert container.has("logger")

        assert not container.has("logger")
