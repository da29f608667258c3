# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    PropertyStatus,
    ContractStatus,
    MaintenanceStatus,
    MaintenancePriority,
    VoucherType,
    VoucherStatus,
    InvoiceStatus,
    BidType,
    BidStatus,
    NotificationPriority,
)

# -------------------------
# Property Models
# -------------------------
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyFilters,
)

# -------------------------
# Profile Models
# -------------------------
from .profile import ProfileUpdate, ProfileFilters

# -------------------------
# Contract Models
# -------------------------
from .contract import ContractCreate, ContractUpdate, ContractFilters

# -------------------------
# Maintenance Models
# -------------------------
from .maintenance import (
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
    MaintenanceFilters,
)

# -------------------------
# Finance Models
# -------------------------
from .voucher import VoucherCreate, VoucherStatusChange, VoucherFilters
from .invoice import InvoiceCreate, InvoiceFilters

# -------------------------
# Bid Models
# -------------------------
from .bid import BidCreate, BidDecision
