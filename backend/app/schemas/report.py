"""
Reporting schemas.
"""
from typing import Any, Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field


class DashboardTotals(BaseModel):
    """Headline counts for the admin dashboard."""
    total_volunteers: int
    total_members: int
    total_hubs: int
    active_placements: int
    total_activities: int
    total_hours: float
    total_donations: Decimal
    active_requests: int
    completed_trainings: int
    recognitions: int


class RecentActivity(BaseModel):
    id: str
    title: str
    type: str
    hours: Optional[float] = None
    end_time: Optional[datetime] = None
    user_name: Optional[str] = None
    hub_name: Optional[str] = None


class TopVolunteer(BaseModel):
    id: str
    name: str
    total_hours: float
    activities_completed: int
    photo: Optional[str] = None


class RegionCount(BaseModel):
    # None groups hubs without a region
    region: Optional[str] = None
    count: int


class DashboardResponse(BaseModel):
    summary: DashboardTotals
    recent_activities: List[RecentActivity]
    top_volunteers: List[TopVolunteer]
    hub_distribution: List[RegionCount]


class ReportType(str, Enum):
    VOLUNTEERS = "volunteers"
    MEMBERS = "members"
    HUBS = "hubs"
    ACTIVITIES = "activities"
    PAYMENTS = "payments"
    PLACEMENTS = "placements"
    TRAININGS = "trainings"


class ReportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class CustomReportRequest(BaseModel):
    type: ReportType
    filters: dict[str, Any] = Field(default_factory=dict)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    format: ReportFormat = ReportFormat.JSON


class CustomReportResponse(BaseModel):
    type: ReportType
    filters: dict[str, Any]
    format: ReportFormat
    columns: List[str]
    total: int
    data: List[dict]
