"""
Entities and the store that owns them.

An entity is a person, an organization, or a media outlet. Entities are
immutable, created during ingestion, and never deleted during a run. The
``EntityStore`` is the single owner of the name → entity mapping; every
component that needs lookup receives the store explicitly.

Tags:
    vigie, domain, entities, identity, store

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from vigie.core.errors import DuplicateEntity, MalformedEntity, UnknownEntity
from vigie.core.identity import identity_key
from vigie.core.logging import get_logger

logger = get_logger(__name__)


class EntityKind(str, Enum):
    """Kinds of entity tracked by the ledger."""

    PERSON = "person"
    ORGANIZATION = "organization"
    MEDIA = "media"


@dataclass(frozen=True)
class Entity:
    """
    A person, organization, or media outlet.

    Equality and hashing use the identity key and kind only, so two
    records spelled ``"Le Monde"`` and ``"le monde"`` are the same entity.

    Attributes:
        name: Display name, as loaded
        kind: Person, organization, or media
        media_type: Sub-type label for media (press, TV, radio, ...)
    """

    name: str = field(compare=False)
    kind: EntityKind
    media_type: str | None = field(default=None, compare=False)
    key: str = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise MalformedEntity(
                "Entity name must be a non-blank string",
                field="name",
                value=self.name,
            )
        try:
            kind = EntityKind(self.kind)
        except ValueError as e:
            raise MalformedEntity(
                f"Unknown entity kind: {self.kind!r}",
                field="kind",
                value=self.kind,
                cause=e,
            ) from e
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "key", identity_key(self.name))
        if kind is EntityKind.MEDIA:
            media_type = (self.media_type or "").strip() or "unknown"
            object.__setattr__(self, "media_type", media_type)
        elif self.media_type is not None:
            raise MalformedEntity(
                "Only media entities carry a media_type",
                field="media_type",
                value=self.media_type,
            )

    @classmethod
    def person(cls, name: str) -> Entity:
        return cls(name, EntityKind.PERSON)

    @classmethod
    def organization(cls, name: str) -> Entity:
        return cls(name, EntityKind.ORGANIZATION)

    @classmethod
    def media(cls, name: str, media_type: str | None = None) -> Entity:
        return cls(name, EntityKind.MEDIA, media_type)

    @property
    def is_person(self) -> bool:
        return self.kind is EntityKind.PERSON

    @property
    def is_organization(self) -> bool:
        return self.kind is EntityKind.ORGANIZATION

    @property
    def is_media(self) -> bool:
        return self.kind is EntityKind.MEDIA

    def __str__(self) -> str:
        if self.is_media:
            return f"{self.name} [{self.media_type}]"
        return self.name


class EntityStore:
    """
    Canonical identity key → entity mapping.

    Pure lookup, no business rules. Iteration follows registration order.

    Example::

        store = EntityStore()
        store.register(Entity.media("Le Monde", "press"))
        store.get("LE MONDE")        # -> Entity(name='Le Monde', ...)
        store.find("Libération")     # -> None
    """

    def __init__(self) -> None:
        self._entities: dict[str, Entity] = {}

    def register(self, entity: Entity) -> Entity:
        """Register an entity and return the stored instance.

        Registering an entity equal to the stored one is a no-op. A
        different entity under the same identity key raises
        ``DuplicateEntity``.
        """
        existing = self._entities.get(entity.key)
        if existing is not None:
            if existing == entity:
                return existing
            raise DuplicateEntity(entity.key).with_context(
                existing_kind=existing.kind.value,
                new_kind=entity.kind.value,
            )
        self._entities[entity.key] = entity
        logger.debug("entity_registered", key=entity.key, kind=entity.kind.value)
        return entity

    def get(self, name: str) -> Entity:
        """Resolve a name (or identity key); raise ``UnknownEntity`` if absent."""
        entity = self.find(name)
        if entity is None:
            raise UnknownEntity(name)
        return entity

    def find(self, name: str) -> Entity | None:
        return self._entities.get(identity_key(name))

    def require(self, entity: Entity) -> Entity:
        """Check that ``entity`` is registered; return the stored instance."""
        stored = self._entities.get(entity.key)
        if stored is None or stored != entity:
            raise UnknownEntity(entity.name)
        return stored

    def of_kind(self, kind: EntityKind) -> list[Entity]:
        return [e for e in self._entities.values() if e.kind is kind]

    def persons(self) -> list[Entity]:
        return self.of_kind(EntityKind.PERSON)

    def organizations(self) -> list[Entity]:
        return self.of_kind(EntityKind.ORGANIZATION)

    def media(self) -> list[Entity]:
        return self.of_kind(EntityKind.MEDIA)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Entity):
            return self._entities.get(item.key) == item
        if isinstance(item, str):
            return identity_key(item) in self._entities
        return False

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))


__all__ = ["EntityKind", "Entity", "EntityStore"]
