"""Application layer module.

Contains the variation and batch services and the authorization gate.
"""

from variations.application.auth import (
    AuthorizationGate,
    Capability,
    Identity,
    Role,
    identity_for_api_key,
)
from variations.application.batch_service import (
    BatchItemError,
    BatchOperations,
    BatchResult,
    BatchService,
    get_batch_service,
)
from variations.application.payloads import VariationInput, parse_variation_input
from variations.application.variation_service import (
    VariationFilter,
    VariationPage,
    VariationService,
    VariationView,
    get_variation_service,
)

__all__ = [
    "AuthorizationGate",
    "BatchItemError",
    "BatchOperations",
    "BatchResult",
    "BatchService",
    "Capability",
    "Identity",
    "Role",
    "VariationFilter",
    "VariationInput",
    "VariationPage",
    "VariationService",
    "VariationView",
    "get_batch_service",
    "get_variation_service",
    "identity_for_api_key",
    "parse_variation_input",
]
