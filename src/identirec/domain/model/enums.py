"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class LinkPrecedence(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class MergeReason(StrEnum):
    """Why two clusters were folded into one."""

    SHARED_EMAIL = "shared_email"
    SHARED_PHONE = "shared_phone"
    SHARED_EMAIL_AND_PHONE = "shared_email_and_phone"
