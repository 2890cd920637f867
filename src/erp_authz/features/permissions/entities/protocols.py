"""Protocol contracts of the permissions feature.

RbacCheck is the stable contract consumed by UI guard components and
controller permission middleware. ActorResolver is supplied by the host
service to turn a session into an ActorContext.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, Union, runtime_checkable

from .actor_context import ActorContext


@runtime_checkable
class RbacCheck(Protocol):
    """Role/permission checks bound to one actor."""

    @abstractmethod
    def has_role(self, role: Union[str, List[str]]) -> bool:
        """True if the actor holds any of the given roles."""
        ...

    @abstractmethod
    def has_permission(self, permission: Union[str, List[str]]) -> bool:
        """True if the actor holds any of the given permissions."""
        ...

    @abstractmethod
    def has_any_role(self, roles: List[str]) -> bool:
        """True if the actor holds at least one role."""
        ...

    @abstractmethod
    def has_any_permission(self, permissions: List[str]) -> bool:
        """True if the actor holds at least one permission."""
        ...

    @abstractmethod
    def has_all_roles(self, roles: List[str]) -> bool:
        """True if the actor holds every role."""
        ...

    @abstractmethod
    def has_all_permissions(self, permissions: List[str]) -> bool:
        """True if the actor holds every permission."""
        ...


@runtime_checkable
class ActorResolver(Protocol):
    """Resolves the actor context once per request."""

    @abstractmethod
    async def resolve(self, actor_id: str, tenant_id: Optional[str]) -> ActorContext:
        """Load role assignments and build the actor context.

        Args:
            actor_id: Authenticated actor
            tenant_id: Tenant the request runs in

        Returns:
            Resolved actor context
        """
        ...
