from cosmos_ioc.container import Container
from cosmos_ioc.contextual import (
    NO_OVERRIDE,
    ContextualBindingBuilder,
    ContextualBindingNeedsBuilder,
)
from cosmos_ioc.dependencies import ProviderDependenciesExtractor, ProviderDependency
from cosmos_ioc.exceptions import (
    CosmosAliasCycleError,
    CosmosCircularDependencyError,
    CosmosDependencyInferenceError,
    CosmosDuplicateAliasError,
    CosmosDuplicateBindingError,
    CosmosError,
    CosmosInvalidRegistrationError,
    CosmosUnboundAliasTargetError,
    CosmosUnresolvedDependencyError,
)
from cosmos_ioc.identifiers import Identifier, Token
from cosmos_ioc.markers import Inject
from cosmos_ioc.providers import Binding

__all__ = [
    "NO_OVERRIDE",
    "Binding",
    "Container",
    "ContextualBindingBuilder",
    "ContextualBindingNeedsBuilder",
    "CosmosAliasCycleError",
    "CosmosCircularDependencyError",
    "CosmosDependencyInferenceError",
    "CosmosDuplicateAliasError",
    "CosmosDuplicateBindingError",
    "CosmosError",
    "CosmosInvalidRegistrationError",
    "CosmosUnboundAliasTargetError",
    "CosmosUnresolvedDependencyError",
    "Identifier",
    "Inject",
    "ProviderDependenciesExtractor",
    "ProviderDependency",
    "Token",
]
