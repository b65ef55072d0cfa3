from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from mpk_core.models import Listing, ListingStatus, Stall, Vendor


class DataSourceError(RuntimeError):
    """A query against the backing store failed. The caller may retry."""

    def __init__(self, message: str, *, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class BaseDataSource(ABC):
    """Read access to vendors, their listings and stalls."""

    @abstractmethod
    def fetch_listings(self) -> List[Listing]: ...

    @abstractmethod
    def fetch_stalls(self, vendor_ids: Iterable[str]) -> List[Stall]: ...

    @abstractmethod
    def fetch_vendor(self, vendor_id: str) -> Optional[Vendor]: ...

    @abstractmethod
    def fetch_vendor_listings(self, vendor_id: str) -> List[Listing]: ...


class WritableDataSource(BaseDataSource):
    """A data source that also lets a vendor manage its own listings."""

    @abstractmethod
    def fetch_listing(self, listing_id: str) -> Optional[Listing]: ...

    @abstractmethod
    def find_or_create_product(self, name: str, category: Optional[str] = None) -> str: ...

    @abstractmethod
    def insert_listing(
        self,
        vendor_id: str,
        product_id: str,
        price: float,
        uom: str,
        status: ListingStatus,
    ) -> str: ...

    @abstractmethod
    def update_listing(
        self,
        listing_id: str,
        product_id: str,
        price: float,
        uom: str,
        status: ListingStatus,
    ) -> bool: ...

    @abstractmethod
    def set_listing_status(self, listing_id: str, status: ListingStatus) -> bool: ...

    @abstractmethod
    def delete_listing(self, listing_id: str) -> bool: ...
