from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ListingStatus(str, Enum):
    """Two-state availability; upstream synonyms are folded in adapters.rows."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass
class Vendor:
    id: str
    business_name: str
    phone_number: Optional[str] = None
    # denormalized profile fields, used when there is no stall record
    stall_number: Optional[str] = None
    complete_address: Optional[str] = None


@dataclass
class Product:
    id: str
    name: str
    category_name: str = ""
    description: str = ""


@dataclass
class Listing:
    vendor: Vendor
    product: Product
    status: ListingStatus = ListingStatus.UNAVAILABLE
    price: Optional[float] = None
    uom: Optional[str] = None
    id: Optional[str] = None

    @property
    def vendor_id(self) -> str:
        return self.vendor.id

    @property
    def is_available(self) -> bool:
        return self.status is ListingStatus.AVAILABLE


@dataclass
class Stall:
    stall_number: Optional[str]
    location_description: Optional[str] = None
    vendor_id: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stall_number": self.stall_number,
            "location_description": self.location_description,
        }


@dataclass
class MeatTypes:
    pork: bool = False
    beef: bool = False
    chicken: bool = False

    def merge(self, other: "MeatTypes") -> None:
        """OR the other flags in; a flag once set stays set."""
        self.pork = self.pork or other.pork
        self.beef = self.beef or other.beef
        self.chicken = self.chicken or other.chicken

    def any(self) -> bool:
        return self.pork or self.beef or self.chicken


@dataclass
class VendorSummary:
    id: str
    business_name: str
    contact_number: Optional[str] = None
    stall: Optional[Stall] = None
    product_count: int = 0
    available_product_count: int = 0
    meat_types: MeatTypes = field(default_factory=MeatTypes)

    @property
    def is_open(self) -> bool:
        return self.available_product_count > 0

    def as_row(self) -> Dict[str, Any]:
        """Presentation shape handed to the directory listing."""
        return {
            "id": self.id,
            "business_name": self.business_name,
            "contact_number": self.contact_number,
            "stall": self.stall.as_dict() if self.stall else None,
            "productCount": self.product_count,
            "availableProductCount": self.available_product_count,
            "meatTypes": {
                "pork": self.meat_types.pork,
                "beef": self.meat_types.beef,
                "chicken": self.meat_types.chicken,
            },
        }


@dataclass(frozen=True)
class Session:
    """The signed-in vendor. Passed explicitly to calls that act on its behalf."""

    vendor_id: str
    username: str
    first_name: str = ""
    last_name: str = ""
    business_name: Optional[str] = None
    is_actual_occupant: bool = False

    @classmethod
    def for_vendor(cls, vendor: Vendor, username: Optional[str] = None) -> "Session":
        return cls(
            vendor_id=vendor.id,
            username=username or vendor.id,
            business_name=vendor.business_name,
        )


@dataclass
class VendorDetails:
    vendor: Vendor
    stall: Optional[Stall] = None
    listings: List[Listing] = field(default_factory=list)


@dataclass
class VendorDashboard:
    session: Session
    vendor: Vendor
    stall: Optional[Stall] = None
    listings: List[Listing] = field(default_factory=list)

    @property
    def active_count(self) -> int:
        return sum(1 for li in self.listings if li.is_available)

    @property
    def inactive_count(self) -> int:
        return len(self.listings) - self.active_count
