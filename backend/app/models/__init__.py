"""
SQLAlchemy models for the Volunteer Hub platform.

Modules:
- Accounts: users, membership types, ID cards
- Hubs: partner organizations, volunteer requests, placements
- Volunteering: activities, trainings, evaluations, recognitions
- Engagement: events, projects, registrations, communications
- Finance: payments
- Settings: registration form fields
"""
# Accounts
from app.models.user import User, UserRole, Gender, MembershipStatus, VolunteerStatus, STAT_FIELDS
from app.models.membership_type import MembershipType, DurationType
from app.models.id_card import IDCard, IDCardType, IDCardStatus

# Hubs
from app.models.hub import Hub, HubStatus, OrganizationType
from app.models.volunteer_request import (
    VolunteerRequest,
    RequestCategory,
    RequestStatus,
    RequestPriority,
    PRIORITY_RANK,
)
from app.models.placement import Placement, PlacementStatus

# Volunteering
from app.models.activity import Activity, ActivityType, ActivityStatus
from app.models.training import Training, TrainingCategory, TrainingLevel, TrainingStatus
from app.models.evaluation import Evaluation, EvaluationType, EvaluationStatus
from app.models.recognition import Recognition, RecognitionType

# Engagement
from app.models.event import Event
from app.models.project import Project, ProjectStatus
from app.models.registration import Registration, RegistrationType, RegistrationStatus
from app.models.communication import (
    Communication,
    CommunicationChannel,
    CommunicationStatus,
    RecipientType,
)

# Finance
from app.models.payment import Payment, PaymentType, PaymentMethod, PaymentStatus

# Settings
from app.models.form_field import FormField, FormType, FieldType

__all__ = [
    # Accounts
    "User",
    "UserRole",
    "Gender",
    "MembershipStatus",
    "VolunteerStatus",
    "STAT_FIELDS",
    "MembershipType",
    "DurationType",
    "IDCard",
    "IDCardType",
    "IDCardStatus",
    # Hubs
    "Hub",
    "HubStatus",
    "OrganizationType",
    "VolunteerRequest",
    "RequestCategory",
    "RequestStatus",
    "RequestPriority",
    "PRIORITY_RANK",
    "Placement",
    "PlacementStatus",
    # Volunteering
    "Activity",
    "ActivityType",
    "ActivityStatus",
    "Training",
    "TrainingCategory",
    "TrainingLevel",
    "TrainingStatus",
    "Evaluation",
    "EvaluationType",
    "EvaluationStatus",
    "Recognition",
    "RecognitionType",
    # Engagement
    "Event",
    "Project",
    "ProjectStatus",
    "Registration",
    "RegistrationType",
    "RegistrationStatus",
    "Communication",
    "CommunicationChannel",
    "CommunicationStatus",
    "RecipientType",
    # Finance
    "Payment",
    "PaymentType",
    "PaymentMethod",
    "PaymentStatus",
    # Settings
    "FormField",
    "FormType",
    "FieldType",
]
