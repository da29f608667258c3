# routers/reports.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from services import reports as service

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


# -----------------------------------------------------
# GET /reports/financial-overview
# Owners: own properties only. Accountants/managers/admins: everything.
# -----------------------------------------------------
@router.get("/financial-overview")
def financial_overview(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    caller: Caller = Depends(get_caller),
):
    return to_http(service.get_financial_overview(caller, start_date=start_date, end_date=end_date))
