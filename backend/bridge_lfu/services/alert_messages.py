"""Alert titles and messages.

Client users are told to contact their administrator; staff get the
actionable renew/replace wording. Templates are keyed by milestone and audience.
"""
from dataclasses import dataclass
from datetime import date

from bridge_lfu.models.notification import AlertMilestone
from bridge_lfu.models.user import Role

STAFF = "staff"
CLIENT = "client"


@dataclass(frozen=True)
class AlertTemplate:
    title: str
    message: str


TEMPLATES: dict[tuple[AlertMilestone, str], AlertTemplate] = {
    (AlertMilestone.EXPIRY, STAFF): AlertTemplate(
        title='License "{asset_name}" expires soon',
        message=(
            'License "{asset_name}" of client "{client_name}" expires in {days} '
            "({target_date}). Remember to renew it."
        ),
    ),
    (AlertMilestone.EXPIRY, CLIENT): AlertTemplate(
        title='License "{asset_name}" expires soon',
        message=(
            'Your license "{asset_name}" expires in {days} ({target_date}). '
            "Please contact your administrator to renew it."
        ),
    ),
    (AlertMilestone.OBSOLESCENCE, STAFF): AlertTemplate(
        title='Equipment "{asset_name}" becomes obsolete soon',
        message=(
            'Equipment "{asset_name}" of client "{client_name}" becomes obsolete in {days} '
            "({target_date}). Plan its replacement."
        ),
    ),
    (AlertMilestone.OBSOLESCENCE, CLIENT): AlertTemplate(
        title='Equipment "{asset_name}" becomes obsolete soon',
        message=(
            'Your equipment "{asset_name}" becomes obsolete in {days} ({target_date}). '
            "Please contact your administrator about its replacement."
        ),
    ),
    (AlertMilestone.END_OF_SALE, STAFF): AlertTemplate(
        title='Equipment "{asset_name}" - end of sale',
        message=(
            'Equipment "{asset_name}" of client "{client_name}" reaches end of sale in {days} '
            "({target_date}). Plan its replacement."
        ),
    ),
    (AlertMilestone.END_OF_SALE, CLIENT): AlertTemplate(
        title='Equipment "{asset_name}" - end of sale',
        message=(
            'Your equipment "{asset_name}" reaches end of sale in {days} ({target_date}). '
            "Please contact your administrator about its replacement."
        ),
    ),
}


def audience_for(role) -> str:
    return CLIENT if role in (Role.CLIENT, Role.CLIENT.value) else STAFF


def format_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def compose_alert(
    milestone: AlertMilestone,
    recipient_role,
    asset_name: str,
    client_name: str | None,
    days: int,
    target_date: date,
) -> tuple[str, str]:
    """Render (title, message) for an asset alert aimed at a recipient role."""
    template = TEMPLATES[(AlertMilestone(milestone), audience_for(recipient_role))]
    values = {
        "asset_name": asset_name,
        "client_name": client_name or "unknown",
        "days": format_days(days),
        "target_date": target_date.strftime("%d/%m/%Y"),
    }
    return template.title.format(**values), template.message.format(**values)
