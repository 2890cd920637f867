"""Validation context value object.

Constructed fresh for every validation call and never reused across
tenants. The correlation id threads one logical operation through logs.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from ...permissions.entities import ActorContext


def _new_correlation_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ValidationContext:
    """Per-operation context passed through every validation stage."""

    entity: str
    tenant_id: Optional[str] = None
    entity_id: Optional[str] = None
    actor_id: Optional[str] = None
    correlation_id: str = field(default_factory=_new_correlation_id)
    timestamp: datetime = field(default_factory=_utc_now)

    @classmethod
    def for_actor(
        cls,
        actor: ActorContext,
        entity: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> "ValidationContext":
        """Create a context scoped to the actor's tenant."""
        return cls(
            entity=entity,
            tenant_id=actor.tenant_id,
            entity_id=entity_id,
            actor_id=actor.actor_id,
            correlation_id=correlation_id or _new_correlation_id(),
        )

    def child(self, index: int, entity_id: Optional[str] = None) -> "ValidationContext":
        """Derive the context of one item of a bulk validation."""
        return replace(
            self,
            entity_id=entity_id,
            correlation_id=f"{self.correlation_id}-item-{index}",
            timestamp=_utc_now(),
        )
