"""Enumerations shared by the ORM models and the API schemas."""
from enum import Enum


class PostStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    HIDDEN = "HIDDEN"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TagKind(str, Enum):
    TECH = "tech"
    SKILL = "skill"


class Profession(str, Enum):
    DEVELOPER = "DEVELOPER"
    DESIGNER = "DESIGNER"
    PM = "PM"
    MARKETER = "MARKETER"
    DATA_ANALYST = "DATA_ANALYST"
    CONTENT_CREATOR = "CONTENT_CREATOR"
    WRITER = "WRITER"
    PHOTOGRAPHER = "PHOTOGRAPHER"
    VIDEO_CREATOR = "VIDEO_CREATOR"
    MUSICIAN = "MUSICIAN"
    PLANNER = "PLANNER"
    RESEARCHER = "RESEARCHER"
    CONSULTANT = "CONSULTANT"
    OTHER = "OTHER"


class ProjectCategory(str, Enum):
    WEB_APP = "WEB_APP"
    MOBILE_APP = "MOBILE_APP"
    DESIGN = "DESIGN"
    BRANDING = "BRANDING"
    MARKETING = "MARKETING"
    VIDEO = "VIDEO"
    PHOTOGRAPHY = "PHOTOGRAPHY"
    MUSIC = "MUSIC"
    WRITING = "WRITING"
    RESEARCH = "RESEARCH"
    DATA_ANALYSIS = "DATA_ANALYSIS"
    CASE_STUDY = "CASE_STUDY"
    GAME = "GAME"
    HARDWARE = "HARDWARE"
    OTHER = "OTHER"


class NotificationType(str, Enum):
    LIKE = "like"
    BOOKMARK = "bookmark"
    COMMENT = "comment"
    POST_HIDDEN = "post_hidden"
    EDITOR_PICK = "editor_pick"
    MENTION = "mention"
    REPORT = "report"


class ReportType(str, Enum):
    SPAM = "SPAM"
    INAPPROPRIATE = "INAPPROPRIATE"
    COPYRIGHT = "COPYRIGHT"
    HARASSMENT = "HARASSMENT"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"


class ReportAction(str, Enum):
    HIDE = "hide"
    KEEP = "keep"
