from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Closed set of roles stored on the profile record."""

    admin = "admin"
    manager = "manager"
    owner = "owner"
    tenant = "tenant"
    buyer = "buyer"
    staff = "staff"
    accountant = "accountant"


# -----------------------------------------------------
# PROPERTY STATUS
# -----------------------------------------------------
class PropertyStatus(BaseStrEnum):
    available = "available"
    rented = "rented"
    occupied = "occupied"
    maintenance = "maintenance"
    reserved = "reserved"


# -----------------------------------------------------
# CONTRACT STATUS
# -----------------------------------------------------
class ContractStatus(BaseStrEnum):
    """Only `active` contracts inside their date range grant tenancy."""

    draft = "draft"
    active = "active"
    expired = "expired"
    terminated = "terminated"


# -----------------------------------------------------
# MAINTENANCE
# -----------------------------------------------------
class MaintenanceStatus(BaseStrEnum):
    pending = "pending"
    approved = "approved"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class MaintenancePriority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


# -----------------------------------------------------
# VOUCHERS
# -----------------------------------------------------
class VoucherType(BaseStrEnum):
    receipt = "receipt"
    payment = "payment"
    journal = "journal"


class VoucherStatus(BaseStrEnum):
    """One-directional: draft → posted → cancelled, or draft → cancelled."""

    draft = "draft"
    posted = "posted"
    cancelled = "cancelled"


# -----------------------------------------------------
# INVOICES
# -----------------------------------------------------
class InvoiceStatus(BaseStrEnum):
    draft = "draft"
    pending = "pending"
    paid = "paid"
    cancelled = "cancelled"


# -----------------------------------------------------
# BIDS
# -----------------------------------------------------
class BidType(BaseStrEnum):
    purchase = "purchase"
    rental = "rental"


class BidStatus(BaseStrEnum):
    """
    pending → manager_approved | rejected | withdrawn
    manager_approved → owner_approved | owner_rejected
    """

    pending = "pending"
    manager_approved = "manager_approved"
    owner_approved = "owner_approved"
    owner_rejected = "owner_rejected"
    rejected = "rejected"
    withdrawn = "withdrawn"
    expired = "expired"


# -----------------------------------------------------
# NOTIFICATIONS
# -----------------------------------------------------
class NotificationPriority(BaseStrEnum):
    low = "low"
    normal = "normal"
    high = "high"
