"""Caller identity and the authorization gate.

The authenticated caller is an explicit ``Identity`` value handed to
every service operation. The gate is consulted before any lookup or
validation so that an anonymous caller always gets Unauthorized, even
for ids that do not exist.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from variations.domain.exceptions import ForbiddenError, UnauthorizedError
from variations.infrastructure.config import settings

logger = structlog.get_logger()


class Capability(str, Enum):
    """Product capabilities checked by the gate."""

    READ_PRODUCTS = "read_products"
    EDIT_PRODUCTS = "edit_products"
    DELETE_PRODUCTS = "delete_products"


class Role(str, Enum):
    """Caller roles."""

    ANONYMOUS = "anonymous"
    CUSTOMER = "customer"
    ADMINISTRATOR = "administrator"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ANONYMOUS: frozenset(),
    Role.CUSTOMER: frozenset(),
    Role.ADMINISTRATOR: frozenset(Capability),
}


@dataclass(frozen=True)
class Identity:
    """Who is making a request and what they may do."""

    user_id: int | None
    role: Role
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "Identity":
        """Identity of a caller without credentials."""
        return cls(user_id=None, role=Role.ANONYMOUS)

    @classmethod
    def for_role(cls, role: Role, user_id: int) -> "Identity":
        """Authenticated identity carrying the role's capabilities."""
        return cls(user_id=user_id, role=role, capabilities=ROLE_CAPABILITIES[role])

    @property
    def is_authenticated(self) -> bool:
        """Whether credentials were presented."""
        return self.role is not Role.ANONYMOUS

    def can(self, capability: Capability) -> bool:
        """Check a single capability."""
        return capability in self.capabilities


def identity_for_api_key(api_key: str) -> Identity | None:
    """Map a bearer API key to an identity.

    Args:
        api_key: Key from the Authorization header.

    Returns:
        Identity for a configured key, None for an unknown key.
    """
    if api_key == settings.admin_api_key:
        return Identity.for_role(Role.ADMINISTRATOR, user_id=1)
    if settings.customer_api_key and api_key == settings.customer_api_key:
        return Identity.for_role(Role.CUSTOMER, user_id=2)
    return None


class AuthorizationGate:
    """Allow/deny decision for one operation."""

    def require(self, identity: Identity, capability: Capability, action: str) -> None:
        """Ensure the caller holds a capability.

        Args:
            identity: Caller identity.
            capability: Capability the operation needs.
            action: Human-readable operation, used in the error message.

        Raises:
            UnauthorizedError: If the caller is anonymous.
            ForbiddenError: If the caller lacks the capability.
        """
        if identity.can(capability):
            return

        logger.warning(
            "Authorization denied",
            user_id=identity.user_id,
            role=identity.role.value,
            capability=capability.value,
        )
        if not identity.is_authenticated:
            raise UnauthorizedError(action)
        raise ForbiddenError(action)
