"""Client view identifiers returned alongside auth responses."""

from __future__ import annotations

from enum import StrEnum

from aidbridge.domain.models import UserType


class Page(StrEnum):
    LOGIN = "login"
    SIGNUP = "signup"
    DONOR_DASHBOARD = "donorDashboard"
    NGO_DASHBOARD = "ngoDashboard"
    ITEM_UPLOAD = "itemUpload"
    ITEM_DETAIL = "itemDetail"
    CHAT = "chat"


_DASHBOARDS = {
    UserType.DONOR: Page.DONOR_DASHBOARD,
    UserType.NGO: Page.NGO_DASHBOARD,
}


def landing_page(user_type: UserType) -> Page:
    """Return the dashboard a user lands on after login or sign-up."""
    return _DASHBOARDS[user_type]
