# routers/__init__.py

from .auth import router as auth_router
from .admin import router as admin_router
from .health import router as health_router

from .properties import router as properties_router
from .profiles import router as profiles_router
from .contracts import router as contracts_router
from .maintenance import router as maintenance_router
from .vouchers import router as vouchers_router
from .invoices import router as invoices_router
from .bids import router as bids_router
from .reports import router as reports_router

ALL_ROUTERS = [
    auth_router,
    admin_router,
    properties_router,
    profiles_router,
    contracts_router,
    maintenance_router,
    vouchers_router,
    invoices_router,
    bids_router,
    reports_router,
    health_router,
]
