"""
Reporting queries: dashboard aggregates and tabular custom reports.
"""
import csv
import io
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.activity import Activity, ActivityStatus
from app.models.hub import Hub, HubStatus
from app.models.payment import Payment, PaymentStatus
from app.models.placement import Placement, PlacementStatus
from app.models.recognition import Recognition
from app.models.training import Training, TrainingStatus
from app.models.user import User, UserRole
from app.models.volunteer_request import VolunteerRequest, RequestStatus
from app.schemas.report import (
    DashboardResponse, DashboardTotals, RecentActivity, TopVolunteer, RegionCount, ReportType
)

DASHBOARD_LIST_LIMIT = 10


def _created_between(model, start: Optional[datetime], end: Optional[datetime]) -> list:
    conditions = []
    if start is not None:
        conditions.append(model.created >= start)
    if end is not None:
        conditions.append(model.created <= end)
    return conditions


async def _count(db: AsyncSession, model, *conditions) -> int:
    result = await db.execute(select(func.count(model.id)).where(*conditions))
    return result.scalar() or 0


async def build_dashboard(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> DashboardResponse:
    """Aggregate platform-wide counts; the date range bounds activity, payment, training and recognition rows."""
    activity_range = _created_between(Activity, start, end)
    completed_activity = [Activity.status == ActivityStatus.COMPLETED, *activity_range]

    hours_result = await db.execute(
        select(func.coalesce(func.sum(Activity.hours), 0)).where(*completed_activity)
    )
    donations_result = await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.COMPLETED,
            *_created_between(Payment, start, end)
        )
    )

    summary = DashboardTotals(
        total_volunteers=await _count(db, User, User.role == UserRole.VOLUNTEER),
        total_members=await _count(db, User, User.role == UserRole.MEMBER),
        total_hubs=await _count(db, Hub, Hub.status == HubStatus.APPROVED),
        active_placements=await _count(db, Placement, Placement.status == PlacementStatus.ACTIVE),
        total_activities=await _count(db, Activity, *completed_activity),
        total_hours=round(float(hours_result.scalar() or 0), 1),
        total_donations=Decimal(str(donations_result.scalar() or 0)),
        active_requests=await _count(db, VolunteerRequest, VolunteerRequest.status == RequestStatus.OPEN),
        completed_trainings=await _count(
            db, Training, Training.status == TrainingStatus.COMPLETED, *_created_between(Training, start, end)
        ),
        recognitions=await _count(
            db, Recognition, Recognition.featured == True, *_created_between(Recognition, start, end)
        ),
    )

    # Recent completed activities
    recent_result = await db.execute(
        select(Activity)
        .options(selectinload(Activity.user), selectinload(Activity.hub))
        .where(*completed_activity)
        .order_by(Activity.end_time.desc().nulls_last(), Activity.created.desc())
        .limit(DASHBOARD_LIST_LIMIT)
    )
    recent_activities = [
        RecentActivity(
            id=a.id,
            title=a.title,
            type=a.type.value,
            hours=a.hours,
            end_time=a.end_time,
            user_name=a.user.name if a.user else None,
            hub_name=a.hub.name if a.hub else None,
        )
        for a in recent_result.scalars().all()
    ]

    # Top volunteers by hours
    top_result = await db.execute(
        select(User)
        .where(User.role == UserRole.VOLUNTEER)
        .order_by(User.total_hours.desc(), User.created.asc())
        .limit(DASHBOARD_LIST_LIMIT)
    )
    top_volunteers = [
        TopVolunteer(
            id=u.id,
            name=u.name,
            total_hours=u.total_hours or 0,
            activities_completed=u.activities_completed or 0,
            photo=u.photo,
        )
        for u in top_result.scalars().all()
    ]

    # Hub distribution by region
    distribution_result = await db.execute(
        select(Hub.region, func.count(Hub.id).label("count"))
        .group_by(Hub.region)
        .order_by(func.count(Hub.id).desc())
    )
    hub_distribution = [
        RegionCount(region=row.region, count=row.count)
        for row in distribution_result.all()
    ]

    return DashboardResponse(
        summary=summary,
        recent_activities=recent_activities,
        top_volunteers=top_volunteers,
        hub_distribution=hub_distribution,
    )


@dataclass
class ReportSpec:
    model: Any
    columns: list[str]
    # Columns that may be used as equality filters
    filterable: set[str]
    base_conditions: tuple = ()


REPORT_SPECS: dict[ReportType, ReportSpec] = {
    ReportType.VOLUNTEERS: ReportSpec(
        model=User,
        columns=["id", "name", "email", "phone", "gender", "volunteer_status", "verified",
                 "total_hours", "activities_completed", "trainings_completed", "created"],
        filterable={"gender", "volunteer_status", "verified", "hub_affiliation_id"},
        base_conditions=(User.role == UserRole.VOLUNTEER,),
    ),
    ReportType.MEMBERS: ReportSpec(
        model=User,
        columns=["id", "name", "email", "phone", "membership_status", "membership_expiry",
                 "membership_type_id", "donations_made", "created"],
        filterable={"membership_status", "membership_type_id", "verified"},
        base_conditions=(User.role == UserRole.MEMBER,),
    ),
    ReportType.HUBS: ReportSpec(
        model=Hub,
        columns=["id", "name", "organization_type", "email", "phone", "region", "status",
                 "verified", "capacity", "active_volunteers", "created"],
        filterable={"organization_type", "region", "status", "verified"},
    ),
    ReportType.ACTIVITIES: ReportSpec(
        model=Activity,
        columns=["id", "user_id", "type", "title", "hub_id", "start_time", "end_time",
                 "hours", "status", "verified", "created"],
        filterable={"user_id", "type", "status", "hub_id", "verified"},
    ),
    ReportType.PAYMENTS: ReportSpec(
        model=Payment,
        columns=["id", "user_id", "type", "amount", "currency", "method", "transaction_id",
                 "status", "processed_at", "created"],
        filterable={"user_id", "type", "method", "status", "currency"},
    ),
    ReportType.PLACEMENTS: ReportSpec(
        model=Placement,
        columns=["id", "volunteer_id", "hub_id", "request_id", "status", "start_date",
                 "end_date", "role", "created"],
        filterable={"volunteer_id", "hub_id", "request_id", "status"},
    ),
    ReportType.TRAININGS: ReportSpec(
        model=Training,
        columns=["id", "title", "category", "level", "instructor_id", "start_date", "end_date",
                 "max_participants", "current_participants", "status", "created"],
        filterable={"category", "level", "status", "instructor_id"},
    ),
}


class ReportFilterError(ValueError):
    """A filter names a column the report does not allow."""


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


async def run_custom_report(
    db: AsyncSession,
    report_type: ReportType,
    filters: dict[str, Any],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> tuple[list[str], list[dict]]:
    """Return (columns, rows) for a report; rows hold JSON-ready values."""
    spec = REPORT_SPECS[report_type]
    unknown = set(filters) - spec.filterable
    if unknown:
        raise ReportFilterError(
            f"Unsupported filter(s) for {report_type.value}: {', '.join(sorted(unknown))}"
        )

    query = select(spec.model).where(*spec.base_conditions)
    for name, value in filters.items():
        column = getattr(spec.model, name)
        enum_class = getattr(column.type, "enum_class", None)
        if enum_class is not None:
            try:
                value = enum_class(value)
            except ValueError:
                raise ReportFilterError(f"Invalid value for {name}: {value}")
        query = query.where(column == value)
    query = query.where(*_created_between(spec.model, start, end))
    query = query.order_by(spec.model.created.desc())

    result = await db.execute(query)
    rows = [
        {column: _plain(getattr(row, column)) for column in spec.columns}
        for row in result.scalars().all()
    ]
    return spec.columns, rows


def rows_to_csv(columns: list[str], rows: list[dict]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns)
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return output.getvalue()
