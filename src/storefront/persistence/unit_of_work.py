"""Explicit unit of work over the protean repositories.

A `DataStore` hands out one `UnitOfWork` per logical operation. Repositories
obtained from the unit of work read through to storage but stage every write
in memory. `commit()` opens a single protean `UnitOfWork` (the storage
transaction), re-checks the staged batch against rows read inside it and
writes the batch there. Contention between concurrent commits, in this
process or another one, is settled by the storage transaction: every
aggregate write carries protean's expected version, so a row that changed
after it was read fails the whole transaction.

Guarded counter deltas (stock decrements and increments) are never computed
from the values read during the operation. They are applied to the row read
inside the storage transaction, and a decrement that would drive the counter
below zero rejects the commit instead of being written.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog
from protean import UnitOfWork as StorageTransaction
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.persistence.errors import NestedUnitOfWork, StorageFault, UnitOfWorkClosed, UnitOfWorkError
from storefront.shared.result import ErrorKind, Result, describe_validation_error

logger = structlog.get_logger(__name__)

_active_unit_of_work: ContextVar["UnitOfWork | None"] = ContextVar("storefront_active_unit_of_work", default=None)


class WriteOperation(Enum):
    INSERT = "Insert"
    UPDATE = "Update"


@dataclass
class StagedWrite:
    entity: Any
    operation: WriteOperation
    expected_version: int = 0
    unique_keys: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class DeltaKey:
    entity_cls: type
    identifier: str
    field: str


class CommitRejected(Exception):
    """Raised inside the storage transaction to abandon a conflicting batch."""


def entity_key(entity_cls: type, identifier: Any) -> tuple[str, str]:
    return (entity_cls.__name__, str(identifier))


def storage_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def unique_keys(unique_fields) -> tuple[tuple[str, ...], ...]:
    """Normalize `("a", ("b", "c"))` into `(("a",), ("b", "c"))`."""
    return tuple((key,) if isinstance(key, str) else tuple(key) for key in unique_fields)


class DataStore:
    """Entry point to persisted storefront data."""

    def begin(self) -> "UnitOfWork":
        if _active_unit_of_work.get() is not None:
            raise NestedUnitOfWork("A unit of work is already active in this context")

        uow = UnitOfWork(self)
        _active_unit_of_work.set(uow)
        return uow

    def fetch(self, entity_cls: type, identifier: Any) -> Any | None:
        """Load one row by id, deleted or not."""
        try:
            return current_domain.repository_for(entity_cls).get(str(identifier))
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            raise StorageFault(f"Failed to load {entity_cls.__name__} '{identifier}'") from exc

    def fetch_all(self, entity_cls: type, **filters: Any) -> list:
        """Load every row matching the equality filters, deleted or not."""
        criteria = {name: storage_value(value) for name, value in filters.items()}
        try:
            query = current_domain.repository_for(entity_cls)._dao.query
            if criteria:
                query = query.filter(**criteria)
            # Cloning resets the limit to the default page, so unlimit last
            return list(query.limit(None).all().items)
        except Exception as exc:
            raise StorageFault(f"Failed to query {entity_cls.__name__}") from exc


class UnitOfWork:
    """One logical operation's batch of staged writes."""

    def __init__(self, store: DataStore) -> None:
        self._store = store
        self._staged: dict[tuple[str, str], StagedWrite] = {}
        self._deltas: dict[DeltaKey, int] = {}
        self._repositories: dict[type, Any] = {}
        self._open = True

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if self._open:
            self.rollback()
        return False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def store(self) -> DataStore:
        return self._store

    def _ensure_open(self) -> None:
        if not self._open:
            raise UnitOfWorkClosed("The unit of work has already been committed or rolled back")

    ###########################
    # Repositories
    ###########################
    def repository(self, entity_cls: type):
        """Repository for `entity_cls`, created once per unit of work."""
        self._ensure_open()
        if entity_cls not in self._repositories:
            from storefront.persistence.repository import repository_class_for

            repository_cls = repository_class_for(entity_cls)
            self._repositories[entity_cls] = repository_cls(self, entity_cls)
        return self._repositories[entity_cls]

    @property
    def products(self):
        from storefront.catalogue.product import Product

        return self.repository(Product)

    @property
    def categories(self):
        from storefront.catalogue.category import Category

        return self.repository(Category)

    @property
    def addresses(self):
        from storefront.customer.address import Address

        return self.repository(Address)

    @property
    def cart_items(self):
        from storefront.cart.cart_item import CartItem

        return self.repository(CartItem)

    @property
    def orders(self):
        from storefront.order.order import Order

        return self.repository(Order)

    @property
    def order_details(self):
        from storefront.order.order import OrderDetail

        return self.repository(OrderDetail)

    ###########################
    # Staging
    ###########################
    def staged(self, entity_cls: type, identifier: Any) -> StagedWrite | None:
        self._ensure_open()
        return self._staged.get(entity_key(entity_cls, identifier))

    def staged_entities(self, entity_cls: type) -> list:
        self._ensure_open()
        return [write.entity for write in self._staged.values() if isinstance(write.entity, entity_cls)]

    def stage_insert(self, entity: Any, unique_fields: tuple = ()) -> None:
        self._ensure_open()
        key = entity_key(type(entity), entity.id)
        existing = self._staged.get(key)
        if existing is not None:
            existing.entity = entity
            return
        self._staged[key] = StagedWrite(entity, WriteOperation.INSERT, 0, unique_keys(unique_fields))

    def stage_update(self, entity: Any, expected_version: int) -> None:
        # Re-staging keeps the first operation and the version it was read at
        self._ensure_open()
        key = entity_key(type(entity), entity.id)
        existing = self._staged.get(key)
        if existing is not None:
            existing.entity = entity
            return
        self._staged[key] = StagedWrite(entity, WriteOperation.UPDATE, expected_version)

    def stage_delta(self, entity_cls: type, identifier: Any, field: str, delta: int) -> None:
        self._ensure_open()
        key = DeltaKey(entity_cls, str(identifier), field)
        self._deltas[key] = self._deltas.get(key, 0) + delta

    def pending_delta(self, entity_cls: type, identifier: Any, field: str) -> int:
        self._ensure_open()
        return self._deltas.get(DeltaKey(entity_cls, str(identifier), field), 0)

    ###########################
    # Completion
    ###########################
    def commit(self) -> Result:
        self._ensure_open()
        write_count = len(self._staged)
        delta_count = len(self._deltas)

        try:
            with StorageTransaction():
                self._check_staged()
                self._write_staged()
        except CommitRejected as exc:
            return self._rejected(str(exc), write_count)
        except ExpectedVersionError:
            return self._rejected("The data was modified by a concurrent commit", write_count)
        except ValidationError as exc:
            return self._rejected(describe_validation_error(exc), write_count)
        except (StorageFault, UnitOfWorkError):
            raise
        except Exception as exc:
            raise StorageFault("Failed to flush the unit of work") from exc
        finally:
            self._close()

        logger.debug("Unit of work committed", writes=write_count, deltas=delta_count)
        return Result.ok()

    def rollback(self) -> None:
        self._ensure_open()
        logger.debug("Unit of work rolled back", discarded=len(self._staged) + len(self._deltas))
        self._close()

    def _close(self) -> None:
        self._open = False
        self._staged = {}
        self._deltas = {}
        self._repositories = {}
        if _active_unit_of_work.get() is self:
            _active_unit_of_work.set(None)

    def _rejected(self, reason: str, write_count: int) -> Result:
        logger.warning("Unit of work commit rejected", reason=reason, writes=write_count)
        return Result.fail(ErrorKind.CONCURRENCY_CONFLICT, reason)

    def _check_staged(self) -> None:
        for write in self._staged.values():
            entity = write.entity
            entity_cls = type(entity)
            current = self._store.fetch(entity_cls, entity.id)

            if write.operation is WriteOperation.INSERT:
                if current is not None:
                    raise CommitRejected(f"{entity_cls.__name__} '{entity.id}' already exists")
                for key in write.unique_keys:
                    self._check_unique(entity, key)
            else:
                if current is None:
                    raise CommitRejected(f"{entity_cls.__name__} '{entity.id}' no longer exists")
                if current.row_version != write.expected_version:
                    raise CommitRejected(f"{entity_cls.__name__} '{entity.id}' was modified concurrently")

    def _check_unique(self, entity: Any, key: tuple[str, ...]) -> None:
        entity_cls = type(entity)
        values = {field_name: getattr(entity, field_name) for field_name in key}
        clashes = [
            row
            for row in self._store.fetch_all(entity_cls, **values)
            if not row.is_deleted and str(row.id) != str(entity.id)
        ]
        if not clashes:
            return

        if len(key) == 1:
            raise CommitRejected(f"{entity_cls.__name__} with {key[0]} '{values[key[0]]}' already exists")
        described = ", ".join(f"{name} '{value}'" for name, value in values.items())
        raise CommitRejected(f"{entity_cls.__name__} with {described} already exists")

    def _write_staged(self) -> None:
        remaining = dict(self._deltas)

        for staged_key, write in self._staged.items():
            entity = write.entity
            for key in list(remaining):
                if entity_key(key.entity_cls, key.identifier) == staged_key:
                    self._apply_delta(entity, key, remaining.pop(key))
            entity.row_version = write.expected_version + 1
            current_domain.repository_for(type(entity)).add(entity)

        self._apply_deltas(remaining)

    def _apply_deltas(self, deltas: dict[DeltaKey, int]) -> None:
        now = datetime.now(UTC)
        for key, delta in deltas.items():
            entity = self._store.fetch(key.entity_cls, key.identifier)
            if entity is None:
                raise CommitRejected(f"{key.entity_cls.__name__} '{key.identifier}' no longer exists")
            self._apply_delta(entity, key, delta)
            entity.updated_date = now
            entity.row_version = entity.row_version + 1
            current_domain.repository_for(key.entity_cls).add(entity)

    def _apply_delta(self, entity: Any, key: DeltaKey, delta: int) -> None:
        """Apply `delta` to the row read in this transaction, refusing to go below zero."""
        if delta < 0:
            label = key.entity_cls.__name__.lower()
            name = getattr(entity, "name", key.identifier)
            if entity.is_deleted or not entity.is_active:
                raise CommitRejected(f"The {label} '{name}' is no longer available")
            available = getattr(entity, key.field)
            if available + delta < 0:
                raise CommitRejected(
                    f"Insufficient stock for {label} '{name}': {available} available, {-delta} requested"
                )
        setattr(entity, key.field, getattr(entity, key.field) + delta)
