from desa.models.models import (
    SETTINGS_ID,
    Admin,
    DesaSettings,
    Document,
    Event,
    Gallery,
    News,
    NewsStatus,
    OrganizationMember,
    Service,
    ServiceSubmission,
    SubmissionStatus,
    TimestampedBase,
)

__all__ = [
    "SETTINGS_ID",
    "Admin",
    "DesaSettings",
    "Document",
    "Event",
    "Gallery",
    "News",
    "NewsStatus",
    "OrganizationMember",
    "Service",
    "ServiceSubmission",
    "SubmissionStatus",
    "TimestampedBase",
]
