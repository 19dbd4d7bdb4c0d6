"""Role and ownership rules for every resource.

Role is the only authorization axis. Each resource has an ``AccessPolicy``
naming the roles that may see or change every record; everyone else is
limited to records they own (or, where the resource has one, records they
are assigned to).
"""

from dataclasses import dataclass, field

from coretax.core.exceptions import AuthorizationError
from coretax.domain.enums import STAFF_ROLES, Role


@dataclass(frozen=True, slots=True)
class Actor:
    """The verified caller of a request."""

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """Who may read, change and delete records of one resource.

    Attributes:
        resource: Name used in error messages.
        read_all: Roles that see every record.
        manage_all: Roles that may change every record.
        delete_roles: Roles that may delete every record.
        owner_can_delete: Whether owners may delete their own records.
        assignee_access: Whether the assigned staff member may read and change.
    """

    resource: str
    read_all: frozenset[Role] = field(default_factory=frozenset)
    manage_all: frozenset[Role] = field(default_factory=frozenset)
    delete_roles: frozenset[Role] = field(default_factory=frozenset)
    owner_can_delete: bool = True
    assignee_access: bool = False

    def sees_everything(self, actor: Actor) -> bool:
        return actor.role in self.read_all

    def manages_everything(self, actor: Actor) -> bool:
        return actor.role in self.manage_all

    def _is_party(self, actor: Actor, owner_id: int, assignee_id: int | None) -> bool:
        if actor.id == owner_id:
            return True
        return self.assignee_access and assignee_id is not None and actor.id == assignee_id

    def can_read(
        self, actor: Actor, owner_id: int, assignee_id: int | None = None
    ) -> bool:
        return (
            self.sees_everything(actor)
            or self.manages_everything(actor)
            or self._is_party(actor, owner_id, assignee_id)
        )

    def can_manage(
        self, actor: Actor, owner_id: int, assignee_id: int | None = None
    ) -> bool:
        return self.manages_everything(actor) or self._is_party(
            actor, owner_id, assignee_id
        )

    def can_delete(self, actor: Actor, owner_id: int) -> bool:
        if actor.role in self.delete_roles:
            return True
        return self.owner_can_delete and actor.id == owner_id

    def require_read(
        self, actor: Actor, owner_id: int, assignee_id: int | None = None
    ) -> None:
        if not self.can_read(actor, owner_id, assignee_id):
            raise AuthorizationError(context={"resource": self.resource})

    def require_manage(
        self, actor: Actor, owner_id: int, assignee_id: int | None = None
    ) -> None:
        if not self.can_manage(actor, owner_id, assignee_id):
            raise AuthorizationError(context={"resource": self.resource})

    def require_delete(self, actor: Actor, owner_id: int) -> None:
        if not self.can_delete(actor, owner_id):
            raise AuthorizationError(context={"resource": self.resource})


def require_role(actor: Actor, *roles: Role) -> None:
    """Raise AuthorizationError unless the actor holds one of ``roles``."""
    if actor.role not in roles:
        raise AuthorizationError(
            "Insufficient permissions",
            context={"required_roles": [str(r) for r in roles]},
        )


AUDITS = AccessPolicy(
    "audit",
    read_all=STAFF_ROLES,
    manage_all=STAFF_ROLES,
    delete_roles=STAFF_ROLES,
    assignee_access=True,
)
CONSULTATIONS = AccessPolicy(
    "consultation",
    read_all=frozenset({Role.ADMIN}),
    manage_all=frozenset({Role.ADMIN}),
    delete_roles=frozenset({Role.ADMIN}),
    assignee_access=True,
)
DOCUMENTS = AccessPolicy("document")
BANK_INTEGRATIONS = AccessPolicy(
    "bank integration",
    read_all=STAFF_ROLES,
    manage_all=STAFF_ROLES,
    delete_roles=frozenset({Role.ADMIN}),
    owner_can_delete=False,
)
TAX_CALCULATIONS = AccessPolicy(
    "tax calculation",
    read_all=frozenset({Role.ADMIN, Role.TAX_OFFICER, Role.CONSULTANT}),
    manage_all=STAFF_ROLES,
    delete_roles=frozenset({Role.ADMIN}),
    owner_can_delete=False,
)
COMPLIANCE_RECORDS = AccessPolicy(
    "compliance record",
    read_all=STAFF_ROLES,
    manage_all=STAFF_ROLES,
    delete_roles=STAFF_ROLES,
    assignee_access=True,
)
PROFILES = AccessPolicy(
    "profile",
    read_all=STAFF_ROLES,
    manage_all=frozenset({Role.ADMIN}),
    delete_roles=frozenset({Role.ADMIN}),
)
NOTIFICATIONS = AccessPolicy("notification")
