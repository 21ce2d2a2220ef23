"""Catalog metadata collaborators.

The attribute metadata store and the store/locale registry are owned by the
catalog application. The schema builders only see these narrow interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from catalog_search.domain.catalog import AttributeDescriptor, Store


class AttributeCatalog(ABC):
    """Supplies searchable and sortable attribute descriptors."""

    @abstractmethod
    def list_attributes(self) -> list[AttributeDescriptor]:
        """Return every attribute that may take part in the index schema."""
        raise NotImplementedError


class StoreRegistry(ABC):
    """Supplies the stores the index serves, each with a resolved locale."""

    @abstractmethod
    def list_stores(self) -> list[Store]:
        raise NotImplementedError

    def get_store(self, store_id: int) -> Store | None:
        for store in self.list_stores():
            if store.store_id == store_id:
                return store
        return None


class InMemoryAttributeCatalog(AttributeCatalog):
    """Attribute catalog backed by a fixed list (tests, scripted rebuilds)."""

    def __init__(self, attributes: Iterable[AttributeDescriptor] = ()) -> None:
        self._attributes: dict[str, AttributeDescriptor] = {}
        for attribute in attributes:
            self.add(attribute)

    def add(self, attribute: AttributeDescriptor) -> None:
        if attribute.code in self._attributes:
            raise ValueError(f"Duplicate attribute code: {attribute.code}")
        self._attributes[attribute.code] = attribute

    def list_attributes(self) -> list[AttributeDescriptor]:
        return list(self._attributes.values())


class InMemoryStoreRegistry(StoreRegistry):
    """Store registry backed by a fixed list."""

    def __init__(self, stores: Iterable[Store] = ()) -> None:
        self._stores: dict[int, Store] = {}
        for store in stores:
            if store.store_id in self._stores:
                raise ValueError(f"Duplicate store id: {store.store_id}")
            self._stores[store.store_id] = store

    def list_stores(self) -> list[Store]:
        return [self._stores[store_id] for store_id in sorted(self._stores)]

    def get_store(self, store_id: int) -> Store | None:
        return self._stores.get(store_id)
