from datacleaner.db.base import Base  # noqa: F401
from datacleaner.models.user import User  # noqa: F401
from datacleaner.models.assign import (
    AssignFeedbackComments,
    AssignFeedbackEditpdfAnnot,
    AssignFeedbackEditpdfCmnt,
    AssignFeedbackEditpdfQuick,
    AssignFeedbackFile,
    AssignGrade,
    AssignSubmission,
    AssignSubmissionFile,
    AssignSubmissionOnlineText,
    AssignUserFlags,
    AssignUserMapping,
)  # noqa: F401
from datacleaner.models.activity import LogstoreStandardLog, Message, RoleAssignment, UserSession  # noqa: F401
from datacleaner.models.config import ConfigEntry, ConfigPlugin, EnvironmentMatrixValue  # noqa: F401

__all__ = [
    "Base",
    "User",
    "AssignSubmission",
    "AssignSubmissionFile",
    "AssignSubmissionOnlineText",
    "AssignGrade",
    "AssignFeedbackComments",
    "AssignFeedbackFile",
    "AssignFeedbackEditpdfAnnot",
    "AssignFeedbackEditpdfCmnt",
    "AssignUserFlags",
    "AssignUserMapping",
    "AssignFeedbackEditpdfQuick",
    "RoleAssignment",
    "UserSession",
    "LogstoreStandardLog",
    "Message",
    "ConfigEntry",
    "ConfigPlugin",
    "EnvironmentMatrixValue",
]
