"""
Project model.

Projects are longer-running initiatives that volunteers can join and log
activities against.
"""
from enum import Enum
from typing import Optional
from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, enum_type


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    PLANNING = "planning"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class Project(BaseModel):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        enum_type(ProjectStatus, "projectstatus"),
        default=ProjectStatus.PLANNING,
        nullable=False
    )
    # User ids of the project leads
    leads: Mapped[list] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<Project {self.name} ({self.status.value})>"
