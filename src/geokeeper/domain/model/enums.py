"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class BranchVariant(StrEnum):
    """Backend dialect a site runs on."""

    OCPL = "oc.pl"
    OCDE = "oc.de"


class CacheType(StrEnum):
    TRADITIONAL = "Traditional"
    MULTI = "Multi"
    QUIZ = "Quiz"
    VIRTUAL = "Virtual"
    EVENT = "Event"
    WEBCAM = "Webcam"
    MOVING = "Moving"
    MATH = "Math"
    DRIVE_IN = "Drive-In"
    OWN = "Own"
    PODCAST = "Podcast"
    OTHER = "Other"


class CacheSize(StrEnum):
    NONE = "none"
    NANO = "nano"
    MICRO = "micro"
    SMALL = "small"
    REGULAR = "regular"
    LARGE = "large"
    XLARGE = "xlarge"
    OTHER = "other"


class CacheStatus(StrEnum):
    AVAILABLE = "Available"
    TEMPORARILY_UNAVAILABLE = "Temporarily unavailable"
    ARCHIVED = "Archived"


class LogType(StrEnum):
    FOUND_IT = "Found it"
    DIDNT_FIND_IT = "Didn't find it"
    COMMENT = "Comment"
    WILL_ATTEND = "Will attend"
    ATTENDED = "Attended"
    TEMPORARILY_UNAVAILABLE = "Temporarily unavailable"
    READY_TO_SEARCH = "Ready to search"
    ARCHIVED = "Archived"
    NEEDS_MAINTENANCE = "Needs maintenance"
    MAINTENANCE_PERFORMED = "Maintenance performed"


class CommentFormat(StrEnum):
    PLAINTEXT = "plaintext"
    AUTO = "auto"
    HTML = "html"
