"""Abstract interface for supplier storage."""

from abc import ABC, abstractmethod

from stockledger.core.entities.supplier import Supplier, SupplierStatus


class ISupplierStore(ABC):
    """Interface for supplier persistence."""

    @abstractmethod
    async def create(self, supplier: Supplier) -> Supplier:
        pass

    @abstractmethod
    async def get(self, supplier_id: int) -> Supplier | None:
        pass

    @abstractmethod
    async def update(self, supplier: Supplier) -> Supplier:
        """Persist edited fields; raises SupplierNotFoundError for an unknown id."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Supplier | None:
        pass

    @abstractmethod
    async def list_suppliers(
        self,
        status: SupplierStatus | None = None,
        search: str | None = None,
    ) -> list[Supplier]:
        pass
