"""Notification service: composes and dispatches emails for battle requests."""

import logging
from datetime import date
from html import escape

from app.config import settings
from app.models.battle_request import BattleRequest
from app.tasks.email_sender import send_email

logger = logging.getLogger(__name__)


def format_battle_date(day: date) -> str:
    """``date(2024, 6, 1)`` -> ``"Saturday, June 1, 2024"``."""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def decision_link(request: BattleRequest, action: str) -> str:
    return f"{settings.base_url}/battle-requests/confirm?token={request.token}&action={action}"


def _details_html(request: BattleRequest, *, include_contact: bool) -> str:
    rows = []
    if include_contact:
        rows += [
            ("From", request.name),
            ("Email", request.email),
            ("Twitch Username", request.twitch_username),
        ]
    rows += [
        ("Date", format_battle_date(request.requested_date)),
        ("Time", request.requested_time),
        ("Game", request.game),
    ]
    if include_contact and request.notes:
        rows.append(("Notes", request.notes))
    return "".join(f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in rows)


async def notify_new_request(request: BattleRequest) -> None:
    """Email the admin a summary of a new request with accept/decline links."""
    if not settings.admin_email:
        logger.warning("admin_email is not configured; no notification for request %s", request.id)
        return

    when = format_battle_date(request.requested_date)
    accept_url = decision_link(request, "accept")
    reject_url = decision_link(request, "reject")
    subject = f"New Battle Request: {request.name} - {when}"
    body = (
        f"New battle request from {request.name} ({request.email}).\n\n"
        f"Twitch: {request.twitch_username}\n"
        f"Date: {when}\n"
        f"Time: {request.requested_time}\n"
        f"Game: {request.game}\n"
        + (f"Notes: {request.notes}\n" if request.notes else "")
        + f"\nAccept: {accept_url}\n"
        f"Decline: {reject_url}\n"
    )
    html = (
        "<h1>New Battle Request</h1>"
        f"{_details_html(request, include_contact=True)}"
        "<p>Would you like to accept or decline this battle request?</p>"
        f'<p><a href="{escape(accept_url)}">Accept</a> | <a href="{escape(reject_url)}">Decline</a></p>'
    )
    await send_email(settings.admin_email, subject, body, html=html)


async def notify_request_confirmed(request: BattleRequest) -> None:
    when = format_battle_date(request.requested_date)
    subject = f"Battle Request Confirmed - {when} at {request.requested_time}"
    body = (
        f"Hi {request.name},\n\n"
        f"Great news! Your battle request has been confirmed.\n\n"
        f"Date: {when}\n"
        f"Time: {request.requested_time}\n"
        f"Game: {request.game}\n\n"
        f"Please be online and ready at the scheduled time.\n"
        f"See you on the battlefield!\n"
    )
    html = (
        "<h1>Battle Request Confirmed!</h1>"
        f"<p>Hi {escape(request.name)},</p>"
        "<p>Great news! Your battle request has been <strong>confirmed</strong>.</p>"
        f"{_details_html(request, include_contact=False)}"
        "<p>See you on the battlefield!</p>"
    )
    await send_email(request.email, subject, body, html=html)


async def notify_request_rejected(request: BattleRequest) -> None:
    when = format_battle_date(request.requested_date)
    subject = "Battle Request - Unable to Accommodate"
    body = (
        f"Hi {request.name},\n\n"
        f"Thank you for your interest in a battle.\n"
        f"Unfortunately the request for {when} at {request.requested_time} "
        f"can't be accommodated.\n\n"
        f"Feel free to submit another request for a different date and time: "
        f"{settings.base_url}\n"
    )
    html = (
        "<h1>Battle Request Status Update</h1>"
        f"<p>Hi {escape(request.name)},</p>"
        f"<p>Unfortunately the request for <strong>{escape(when)}</strong> at "
        f"<strong>{escape(request.requested_time)}</strong> can't be accommodated.</p>"
        f'<p><a href="{escape(settings.base_url)}">Submit a new request</a></p>'
    )
    await send_email(request.email, subject, body, html=html)
