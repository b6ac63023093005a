"""Soft-delete repository bound to a unit of work.

Every storefront entity carries the same audit shape (`id`, `created_date`,
`updated_date`, `is_active`, `is_deleted`, `deleted_date`, `row_version`).
Rows are never physically removed: `soft_delete` flags them and the regular
read paths hide flagged rows. Only the audit path
(`get_including_deleted`, `all_including_deleted`) sees them.

Reads go to storage and are overlaid with whatever the owning unit of work has
already staged, so an operation always sees its own writes.
"""

from datetime import UTC, datetime
from typing import Any, Callable, Generic, TypeVar

from protean.exceptions import InvalidOperationError

from storefront.persistence.unit_of_work import UnitOfWork, storage_value

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=UTC)

AUDIT_FIELDS = ("created_date", "updated_date", "is_active", "is_deleted", "deleted_date", "row_version")


def _matches(entity: Any, filters: dict[str, Any]) -> bool:
    for field_name, expected in filters.items():
        actual = getattr(entity, field_name, None)
        if storage_value(actual) != storage_value(expected) and str(actual) != str(storage_value(expected)):
            return False
    return True


def _by_creation(entity: Any) -> datetime:
    return entity.created_date or _EPOCH


class SoftDeleteRepository(Generic[T]):
    """Collection-like access to one entity type inside one unit of work."""

    entity_cls: type | None = None
    # Each entry is a field name or a tuple of names forming a composite key
    unique_fields: tuple = ()

    def __init__(self, uow: UnitOfWork, entity_cls: type | None = None) -> None:
        self._uow = uow
        self._entity_cls = entity_cls or self.entity_cls
        if self._entity_cls is None:
            raise TypeError(f"{type(self).__name__} needs an entity class")

    @property
    def uow(self) -> UnitOfWork:
        return self._uow

    def _load(self, identifier: Any) -> T | None:
        staged = self._uow.staged(self._entity_cls, identifier)
        if staged is not None:
            return staged.entity
        return self._uow.store.fetch(self._entity_cls, identifier)

    def _overlay(self, persisted: list[T], filters: dict[str, Any]) -> list[T]:
        rows = {str(entity.id): entity for entity in persisted}
        for entity in self._uow.staged_entities(self._entity_cls):
            rows[str(entity.id)] = entity
        return sorted((entity for entity in rows.values() if _matches(entity, filters)), key=_by_creation)

    def _stage(self, entity: T) -> None:
        self._uow.stage_update(entity, entity.row_version)

    ###########################
    # Reads
    ###########################
    def get_by_id(self, identifier: Any) -> T | None:
        if identifier is None:
            return None
        entity = self._load(identifier)
        if entity is None or entity.is_deleted:
            return None
        return entity

    def get_all(self, predicate: Callable[[T], bool] | None = None, **filters: Any) -> list[T]:
        persisted = self._uow.store.fetch_all(self._entity_cls, is_deleted=False, **filters)
        entities = [entity for entity in self._overlay(persisted, filters) if not entity.is_deleted]
        if predicate is not None:
            entities = [entity for entity in entities if predicate(entity)]
        return entities

    def find_one(self, predicate: Callable[[T], bool] | None = None, **filters: Any) -> T | None:
        entities = self.get_all(predicate, **filters)
        return entities[0] if entities else None

    def exists(self, identifier: Any) -> bool:
        return self.get_by_id(identifier) is not None

    def get_including_deleted(self, identifier: Any) -> T | None:
        """Audit read: returns the row whether or not it was soft-deleted."""
        return self._load(identifier)

    def all_including_deleted(self, **filters: Any) -> list[T]:
        """Audit read: every matching row, soft-deleted ones included."""
        persisted = self._uow.store.fetch_all(self._entity_cls, **filters)
        return self._overlay(persisted, filters)

    ###########################
    # Writes
    ###########################
    def add(self, entity: T) -> T:
        if not isinstance(entity, self._entity_cls):
            raise InvalidOperationError(f"Expected a {self._entity_cls.__name__}, got {type(entity).__name__}")
        if entity.id is None or str(entity.id) == "":
            raise InvalidOperationError(f"{self._entity_cls.__name__} must have an identifier before it is added")
        if self._load(entity.id) is not None:
            raise InvalidOperationError(f"{self._entity_cls.__name__} '{entity.id}' already exists")

        entity.created_date = datetime.now(UTC)
        self._uow.stage_insert(entity, self.unique_fields)
        return entity

    def add_range(self, entities: list[T]) -> list[T]:
        return [self.add(entity) for entity in entities]

    def update(self, entity: T) -> T:
        current = self._load(entity.id)
        if current is None or current.is_deleted:
            raise InvalidOperationError(f"{self._entity_cls.__name__} '{entity.id}' does not exist")

        persisted = self._uow.store.fetch(self._entity_cls, entity.id)
        baseline = persisted if persisted is not None else current
        self._check_mutable(baseline, entity)

        entity.created_date = baseline.created_date
        entity.updated_date = datetime.now(UTC)
        self._stage(entity)
        return entity

    def soft_delete(self, identifier: Any) -> bool:
        entity = self.get_by_id(identifier)
        if entity is None:
            return False

        now = datetime.now(UTC)
        entity.is_deleted = True
        entity.is_active = False
        if entity.deleted_date is None:
            entity.deleted_date = now
        entity.updated_date = now
        self._stage(entity)
        return True

    def soft_delete_range(self, identifiers: list[Any]) -> int:
        return sum(1 for identifier in identifiers if self.soft_delete(identifier))

    def _check_mutable(self, current: T, entity: T) -> None:
        """Hook for repositories that restrict which fields may change."""


def repository_class_for(entity_cls: type) -> type[SoftDeleteRepository]:
    from storefront.cart.repository import CartItemRepository
    from storefront.catalogue.repository import ProductRepository
    from storefront.order.repository import OrderRepository

    for repository_cls in (ProductRepository, OrderRepository, CartItemRepository):
        if repository_cls.entity_cls is entity_cls:
            return repository_cls
    return SoftDeleteRepository
