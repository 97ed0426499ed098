from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar, overload

from cosmos_ioc._internal.autoregistration import ConcreteTypeAutowiringPolicy
from cosmos_ioc.aliases import AliasesRegistry
from cosmos_ioc.contextual import (
    NO_OVERRIDE,
    ContextualBindingBuilder,
    ContextualBindingsStore,
)
from cosmos_ioc.dependencies import ProviderDependenciesExtractor
from cosmos_ioc.exceptions import (
    CosmosCircularDependencyError,
    CosmosInvalidRegistrationError,
    CosmosUnboundAliasTargetError,
    CosmosUnresolvedDependencyError,
)
from cosmos_ioc.identifiers import (
    Identifier,
    describe_identifier,
    is_valid_identifier,
)
from cosmos_ioc.providers import (
    Binding,
    BindingsRegistry,
    Concrete,
    ExplicitDependencies,
    InstancesCache,
)

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _ResolutionFrame:
    """An identifier under construction and the concrete building it."""

    identifier: Identifier
    concrete: Any


class Container:
    """Register bindings and resolve identifiers into instances.

    Identifiers are strings, ``Token`` objects, or classes used as their own
    key. Each identifier has at most one binding; a binding maps it to a
    factory, a class, or another identifier, and is either shared (built once
    and cached) or built on every ``make``.

    ``make`` follows aliases, applies contextual overrides for the type being
    built, detects dependency cycles, and infers constructor dependencies from
    annotations unless they were declared at bind time.

    A container is meant to be owned by one thread of control. Callers sharing
    it across threads must serialize registration and resolution themselves.
    """

    def __init__(
        self,
        *,
        autowire_concrete_types: bool = False,
        dependencies_extractor: ProviderDependenciesExtractor | None = None,
    ) -> None:
        """Initialize an empty container.

        Args:
            autowire_concrete_types: Let unregistered concrete classes satisfy
                dependencies. They are bound on first use, transient by
                default and shared for pydantic settings models.
            dependencies_extractor: Replacement for the annotation-based
                dependency inference.

        Examples:
            .. code-block:: python

                container = Container()

                autowiring_container = Container(autowire_concrete_types=True)

        """
        self._bindings = BindingsRegistry()
        self._instances = InstancesCache()
        self._aliases = AliasesRegistry()
        self._contextual = ContextualBindingsStore()
        self._autowire_concrete_types = autowire_concrete_types
        self._autowiring_policy = ConcreteTypeAutowiringPolicy()
        self._dependencies_extractor = dependencies_extractor or ProviderDependenciesExtractor()
        self._resolution_stack: ContextVar[tuple[_ResolutionFrame, ...]] = ContextVar(
            f"cosmos_ioc_resolution_stack_{id(self)}",
            default=(),
        )

    # region Registration

    def bind(
        self,
        identifier: Identifier,
        concrete: Concrete,
        shared: bool = False,  # noqa: FBT001, FBT002
        *,
        dependencies: ExplicitDependencies | None = None,
        satisfies: Iterable[Any] = (),
    ) -> None:
        """Bind an identifier to a factory, a class, or another identifier.

        Args:
            identifier: Key the binding is registered under.
            concrete: Factory callable, class, or identifier resolved in place
                of ``identifier``.
            shared: Cache the first built instance and return it from every
                later ``make``.
            dependencies: Explicit dependency identifiers. A sequence is passed
                positionally in order, a mapping is passed by parameter name.
                When omitted, dependencies are inferred from annotations.
            satisfies: Abstract identifiers this binding implements: base
                classes, protocols, names or tokens. ``has`` reports them as
                available and ``make`` resolves them through this binding.

        Raises:
            CosmosDuplicateBindingError: If ``identifier`` is already bound. The
                existing binding is kept.
            CosmosInvalidRegistrationError: If ``identifier`` or ``concrete`` is
                invalid, or ``dependencies`` do not fit the concrete's signature.

        Examples:
            .. code-block:: python

                container.bind("logger", ConsoleLogger)
                container.bind(
                    "mailer",
                    SmtpMailer,
                    dependencies=["logger"],
                    satisfies=[Mailer],
                )

        """
        self._ensure_identifier(identifier, argument="identifier", method_name="bind")
        self._ensure_concrete(concrete, method_name="bind")
        if dependencies is not None:
            self._dependencies_extractor.validate_explicit(concrete, dependencies)
        if isinstance(satisfies, str):
            msg = (
                "bind() parameter 'satisfies' must be a collection of identifiers, "
                f"not a string: {satisfies!r}."
            )
            raise CosmosInvalidRegistrationError(msg)
        try:
            satisfied = frozenset(satisfies)
        except TypeError as error:
            msg = f"bind() parameter 'satisfies' must contain hashable identifiers: {error}"
            raise CosmosInvalidRegistrationError(msg) from error
        if None in satisfied:
            msg = "bind() parameter 'satisfies' must not contain None."
            raise CosmosInvalidRegistrationError(msg)

        self._bindings.add(
            identifier,
            Binding(
                concrete=concrete,
                shared=shared,
                dependencies=dependencies,
                satisfies=satisfied,
            ),
        )
        logger.debug(
            "Bound %s to %s (shared=%s)",
            describe_identifier(identifier),
            describe_identifier(concrete),
            shared,
        )

    def singleton(
        self,
        identifier: Identifier,
        concrete: Concrete,
        *,
        dependencies: ExplicitDependencies | None = None,
        satisfies: Iterable[Any] = (),
    ) -> None:
        """Bind an identifier as shared; see ``bind`` for the arguments.

        Examples:
            .. code-block:: python

                container.singleton("file.logger", lambda: FileLogger("app.log"))
                assert container.make("file.logger") is container.make("file.logger")

        """
        self.bind(
            identifier,
            concrete,
            shared=True,
            dependencies=dependencies,
            satisfies=satisfies,
        )

    def instance(self, identifier: Identifier, value: Any) -> None:
        """Register a pre-built value, replacing any cached instance.

        The value is always shared. Bindings are neither consulted nor changed.

        Raises:
            CosmosInvalidRegistrationError: If ``identifier`` is ``None`` or
                unhashable.

        """
        self._ensure_identifier(identifier, argument="identifier", method_name="instance")
        self._instances.store(identifier, value)
        logger.debug("Registered instance for %s", describe_identifier(identifier))

    def alias(self, identifier: Identifier, alias: Identifier) -> None:
        """Make ``alias`` resolve exactly like ``identifier``.

        Aliases may point at other aliases; chains are followed to the end.

        Raises:
            CosmosDuplicateAliasError: If ``alias`` is already an alias.
            CosmosUnboundAliasTargetError: If ``identifier`` is not known to
                ``has``.
            CosmosAliasCycleError: If the chain of ``identifier`` already leads
                to ``alias``.

        Examples:
            .. code-block:: python

                container.bind("logger", ConsoleLogger)
                container.alias("logger", "log")
                container.make("log")

        """
        self._ensure_identifier(identifier, argument="identifier", method_name="alias")
        self._ensure_identifier(alias, argument="alias", method_name="alias")
        if alias not in self._aliases and not self.has(identifier):
            raise CosmosUnboundAliasTargetError(identifier, alias)
        self._aliases.add(identifier, alias)
        logger.debug(
            "Aliased %s to %s",
            describe_identifier(alias),
            describe_identifier(identifier),
        )

    def when(self, context: Identifier) -> ContextualBindingBuilder:
        """Start a contextual binding for dependencies of ``context``.

        Examples:
            .. code-block:: python

                container.when("payment.service").needs("logger").give("file.logger")

        """
        return ContextualBindingBuilder(self, context)

    def add_contextual_binding(
        self,
        context: Identifier,
        abstract: Identifier,
        implementation: Any,
    ) -> None:
        """Use ``implementation`` for ``abstract`` while ``context`` is being built.

        ``context`` is the identifier (or the concrete class) under
        construction. A later call for the same pair replaces the earlier one.

        Raises:
            CosmosInvalidRegistrationError: If an argument is ``None`` or
                unhashable.

        """
        method_name = "add_contextual_binding"
        self._ensure_identifier(context, argument="context", method_name=method_name)
        self._ensure_identifier(abstract, argument="abstract", method_name=method_name)
        self._ensure_concrete(implementation, method_name=method_name)
        self._contextual.add(context, abstract, implementation)
        logger.debug(
            "Contextual binding: %s needs %s -> %s",
            describe_identifier(context),
            describe_identifier(abstract),
            describe_identifier(implementation),
        )

    # endregion Registration

    # region Queries

    def has(self, identifier: Identifier) -> bool:
        """Return whether the container knows ``identifier``.

        True for bound, instanced and aliased identifiers, and for any
        identifier some binding lists in ``satisfies``.
        """
        if not is_valid_identifier(identifier):
            return False
        if identifier in self._bindings or identifier in self._instances:
            return True
        if identifier in self._aliases:
            return True
        return self._bindings.find_satisfying(identifier) is not None

    def is_shared(self, identifier: Identifier) -> bool:
        """Return whether resolving ``identifier`` reuses one cached instance."""
        identifier = self.get_alias(identifier)
        if identifier in self._instances:
            return True
        binding = self._bindings.find(identifier)
        if binding is None:
            return False
        return binding.shared

    def get_alias(self, identifier: Identifier) -> Identifier:
        """Return the identifier at the end of the alias chain of ``identifier``."""
        return self._aliases.resolve(identifier)

    def get_concrete(self, identifier: Identifier) -> Concrete:
        """Return the bound concrete, or ``identifier`` itself when unbound."""
        binding = self._bindings.find(identifier)
        if binding is None:
            return identifier
        return binding.concrete

    def get_contextual_concrete(self, abstract: Identifier, context: Identifier) -> Any:
        """Return the override for ``abstract`` inside ``context``, or ``NO_OVERRIDE``."""
        return self._contextual.find(abstract, context)

    # endregion Queries

    # region Resolution

    @overload
    def make(self, identifier: type[T], /, *args: Any, **kwargs: Any) -> T: ...

    @overload
    def make(self, identifier: Any, /, *args: Any, **kwargs: Any) -> Any: ...

    def make(self, identifier: Any, /, *args: Any, **kwargs: Any) -> Any:
        """Resolve ``identifier`` into an instance.

        Args:
            identifier: Identifier to resolve.
            *args: Explicit positional arguments for the factory or constructor.
            **kwargs: Explicit keyword arguments for the factory or constructor.
                With any explicit argument, dependency inference is skipped.

        Returns:
            The cached instance for shared identifiers, otherwise a new one.

        Raises:
            CosmosCircularDependencyError: If building ``identifier`` requires
                an identifier that is already under construction.
            CosmosUnresolvedDependencyError: If ``identifier`` or one of its
                dependencies cannot be resolved.
            CosmosDependencyInferenceError: If a required constructor parameter
                has no annotation and no explicit dependency was declared.

        Notes:
            Factories may call ``make`` themselves. Those nested calls take
            part in the same cycle detection and see contextual overrides of
            the identifier being built.

        Examples:
            .. code-block:: python

                container.bind("logger", ConsoleLogger)
                logger = container.make("logger")

        """
        return self._make(identifier, args, kwargs, apply_context=True)

    def flush(self) -> None:
        """Remove every binding, instance, alias and contextual override."""
        self._bindings.clear()
        self._instances.clear()
        self._aliases.clear()
        self._contextual.clear()
        logger.debug("Flushed container")

    def _make(
        self,
        identifier: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        *,
        apply_context: bool,
    ) -> Any:
        stack = self._resolution_stack.get()
        if apply_context and stack:
            override = self._find_contextual_override(identifier, stack[-1])
            if override is not NO_OVERRIDE:
                identifier = override

        canonical = self.get_alias(identifier)
        if any(frame.identifier == canonical for frame in stack):
            raise CosmosCircularDependencyError([*(frame.identifier for frame in stack), canonical])

        if canonical in self._instances:
            return self._instances.get(canonical)

        if canonical not in self._bindings:
            satisfying = self._find_satisfying_identifier(canonical)
            if satisfying is not None:
                return self._with_frame(
                    _ResolutionFrame(identifier=canonical, concrete=satisfying),
                    lambda: self._make(satisfying, args, kwargs, apply_context=False),
                )
            if self._autowire_concrete_types and self._autowiring_policy.is_eligible_concrete(
                canonical,
            ):
                self._autowire(canonical)

        binding = self._bindings.find(canonical)
        concrete = self.get_concrete(canonical)
        frame = _ResolutionFrame(identifier=canonical, concrete=concrete)

        if callable(concrete):
            instance = self._with_frame(
                frame,
                lambda: self._build(frame, binding, args, kwargs),
            )
        elif binding is not None:
            instance = self._with_frame(
                frame,
                lambda: self._make(concrete, args, kwargs, apply_context=False),
            )
        else:
            requested_by = stack[-1].identifier if stack else None
            raise CosmosUnresolvedDependencyError(canonical, requested_by=requested_by)

        if binding is not None and binding.shared:
            self._instances.store(canonical, instance)
            logger.debug("Cached shared instance for %s", describe_identifier(canonical))
        return instance

    def _build(
        self,
        frame: _ResolutionFrame,
        binding: Binding | None,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        concrete = frame.concrete
        if args or kwargs:
            return concrete(*args, **kwargs)

        if binding is not None and binding.dependencies is not None:
            dependencies = self._dependencies_extractor.from_explicit(
                concrete,
                binding.dependencies,
            )
        else:
            dependencies = self._dependencies_extractor.extract(concrete)

        call_args: list[Any] = []
        call_kwargs: dict[str, Any] = {}
        for dependency in dependencies:
            target = dependency.provides
            override = self._find_contextual_override(target, frame)
            is_override = override is not NO_OVERRIDE
            if is_override:
                target = override

            if not self._is_resolvable(target, is_override=is_override):
                if dependency.has_default and dependency.passed_by_keyword:
                    continue
                if dependency.has_default:
                    call_args.append(dependency.parameter.default)  # type: ignore[union-attr]
                    continue
                raise CosmosUnresolvedDependencyError(
                    dependency.provides,
                    requested_by=frame.identifier,
                )

            value = self._make(target, (), {}, apply_context=False)
            if dependency.passed_by_keyword:
                call_kwargs[dependency.parameter.name] = value  # type: ignore[union-attr]
            else:
                call_args.append(value)

        return concrete(*call_args, **call_kwargs)

    def _with_frame(self, frame: _ResolutionFrame, build: Callable[[], T]) -> T:
        token = self._resolution_stack.set((*self._resolution_stack.get(), frame))
        try:
            return build()
        finally:
            self._resolution_stack.reset(token)

    def _find_contextual_override(self, abstract: Any, frame: _ResolutionFrame) -> Any:
        if not is_valid_identifier(abstract):
            return NO_OVERRIDE
        contexts = [frame.identifier]
        if frame.concrete is not frame.identifier and is_valid_identifier(frame.concrete):
            contexts.append(frame.concrete)
        abstracts = [abstract]
        canonical = self.get_alias(abstract)
        if canonical != abstract:
            abstracts.append(canonical)

        for context in contexts:
            for candidate in abstracts:
                override = self._contextual.find(candidate, context)
                if override is not NO_OVERRIDE:
                    logger.debug(
                        "Using contextual %s for %s inside %s",
                        describe_identifier(override),
                        describe_identifier(candidate),
                        describe_identifier(context),
                    )
                    return override
        return NO_OVERRIDE

    def _find_satisfying_identifier(self, identifier: Identifier) -> Identifier | None:
        if not is_valid_identifier(identifier):
            return None
        return self._bindings.find_satisfying(identifier)

    def _is_resolvable(self, target: Any, *, is_override: bool) -> bool:
        if self.has(target):
            return True
        if is_override and callable(target):
            return True
        return self._autowire_concrete_types and self._autowiring_policy.is_eligible_concrete(
            target,
        )

    def _autowire(self, concrete_type: type[Any]) -> None:
        decision = self._autowiring_policy.decide(concrete_type)
        self._bindings.add(
            concrete_type,
            Binding(
                concrete=concrete_type,
                shared=decision.shared,
                dependencies=() if decision.build_without_arguments else None,
            ),
        )
        logger.debug(
            "Autowired %s (shared=%s)",
            describe_identifier(concrete_type),
            decision.shared,
        )

    # endregion Resolution

    def _ensure_identifier(self, value: Any, *, argument: str, method_name: str) -> None:
        if not is_valid_identifier(value):
            msg = (
                f"{method_name}() parameter '{argument}' must be a hashable identifier "
                f"other than None, got {value!r}."
            )
            raise CosmosInvalidRegistrationError(msg)

    def _ensure_concrete(self, concrete: Any, *, method_name: str) -> None:
        if not callable(concrete) and not is_valid_identifier(concrete):
            msg = (
                f"{method_name}() concrete must be a callable or a hashable identifier, "
                f"got {concrete!r}."
            )
            raise CosmosInvalidRegistrationError(msg)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.flush()
