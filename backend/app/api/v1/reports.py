"""
Reporting endpoints: admin dashboard and custom tabular reports.
"""
import io
from datetime import date, datetime, time, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.permissions import require_admin, require_staff
from app.models.base import utcnow
from app.models.user import User
from app.schemas.report import (
    DashboardResponse, CustomReportRequest, CustomReportResponse, ReportFormat
)
from app.services.reports import build_dashboard, run_custom_report, rows_to_csv, ReportFilterError

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Platform totals; the optional date range bounds activities, payments, trainings and recognitions."""
    start = datetime.combine(start_date, time.min) if start_date else None
    # End date is inclusive
    end = datetime.combine(end_date + timedelta(days=1), time.min) - timedelta(microseconds=1) if end_date else None
    return await build_dashboard(db, start, end)


@router.post("/custom", response_model=CustomReportResponse)
async def custom_report(
    report_request: CustomReportRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Tabular report as JSON rows or a CSV download. Admin only."""
    try:
        columns, rows = await run_custom_report(
            db,
            report_request.type,
            report_request.filters,
            report_request.start_date,
            report_request.end_date,
        )
    except ReportFilterError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if report_request.format == ReportFormat.CSV:
        filename = f"{report_request.type.value}_report_{utcnow().strftime('%Y%m%d_%H%M%S')}.csv"
        return StreamingResponse(
            io.StringIO(rows_to_csv(columns, rows)),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"}
        )

    return CustomReportResponse(
        type=report_request.type,
        filters=report_request.filters,
        format=report_request.format,
        columns=columns,
        total=len(rows),
        data=rows,
    )
