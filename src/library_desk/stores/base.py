"""
Store pattern implementation for Library Desk.

Each store owns one collection of entities in memory and is the only place
that collection is mutated. Stores share a small base that provides:

1. **Case-insensitive identity**: ids are compared with ``str.casefold``,
   while the entity keeps the casing it was created with
2. **Insertion order**: entities are kept in the order they were added;
   updates replace an entity in place without moving it
3. **Validation at the boundary**: Pydantic ``ValidationError`` becomes an
   :class:`InvalidArgumentError` so callers only ever see ``LibraryError``
4. **Snapshot/restore**: hooks used by the persistence gateway
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import DuplicateError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class LoanIndex(Protocol):
    """Read-only view of the lending ledger used by deletion guards."""

    def has_active_loan_for_book(self, book_id: str) -> bool: ...

    def has_active_loan_for_member(self, member_id: str) -> bool: ...


class StoreView(Generic[ModelType]):
    """
    Lazy, restartable sequence over a store's entities.

    Nothing is read until the view is iterated, and every iteration starts
    over from the current contents of the store. Iteration works on a copy
    of the entity list, so the store may be mutated while a view is walked.
    """

    def __init__(
        self,
        source: Callable[[], Iterable[ModelType]],
        predicate: Callable[[ModelType], bool] | None = None,
    ):
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[ModelType]:
        for item in tuple(self._source()):
            if self._predicate is None or self._predicate(item):
                yield item

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


def format_validation_error(error: ValidationError) -> str:
    """Flatten a Pydantic error into one readable line."""
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        message = err["msg"].removeprefix("Value error, ")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts)


class BaseStore(ABC, Generic[ModelType]):
    """
    Abstract in-memory store keyed by case-insensitive identifier.

    Subclasses add the domain operations (add/update/remove, copy
    accounting, issue/return) on top of the shared lookup helpers.
    """

    def __init__(self) -> None:
        self._items: dict[str, ModelType] = {}

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the Pydantic model class held by the store."""

    @property
    @abstractmethod
    def entity_name(self) -> str:
        """Human-readable entity name for error messages."""

    @staticmethod
    def normalize_id(entity_id: str) -> str:
        """Return the lookup key for an identifier."""
        return entity_id.strip().casefold()

    def _validate(self, **data: Any) -> ModelType:
        try:
            return self.model_class.model_validate(data)
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid {self.entity_name.lower()}: {format_validation_error(e)}"
            ) from e

    def find(self, entity_id: str) -> ModelType | None:
        """Get entity by id, or None if absent."""
        return self._items.get(self.normalize_id(entity_id))

    def get(self, entity_id: str) -> ModelType:
        """
        Get entity by id.

        Raises:
            NotFoundError: If no entity has this id
        """
        entity = self.find(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} {entity_id} not found")
        return entity

    def get_all(self) -> StoreView[ModelType]:
        """All entities, in insertion order."""
        return StoreView(self._items.values)

    def _insert(self, entity: ModelType) -> ModelType:
        key = self.normalize_id(entity.id)
        if key in self._items:
            raise DuplicateError(f"{self.entity_name} ID {entity.id} already exists")
        self._items[key] = entity
        return entity

    def _replace(self, entity: ModelType) -> ModelType:
        # Assigning to an existing key keeps its position in the dict
        self._items[self.normalize_id(entity.id)] = entity
        return entity

    def _delete(self, entity: ModelType) -> ModelType:
        del self._items[self.normalize_id(entity.id)]
        return entity

    def snapshot(self) -> list[ModelType]:
        """Copies of every entity, in insertion order."""
        return [item.model_copy() for item in self._items.values()]

    def restore(self, entities: Iterable[ModelType]) -> None:
        """
        Replace the store contents with previously saved entities.

        Raises:
            DuplicateError: If two entities share an id
        """
        self._items = {}
        for entity in entities:
            self._insert(entity.model_copy())
        logger.debug("Restored %d %s entities", len(self._items), self.entity_name.lower())

    def clear(self) -> None:
        self._items = {}

    def __contains__(self, entity_id: object) -> bool:
        return isinstance(entity_id, str) and self.normalize_id(entity_id) in self._items

    def __len__(self) -> int:
        return len(self._items)
