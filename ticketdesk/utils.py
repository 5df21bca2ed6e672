# ticketdesk/utils.py

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app

from .constants import (
    TicketType, PaymentStatus, TICKET_SUFFIX_DIGITS,
    DEFAULT_PRICE_VIP, DEFAULT_PRICE_GENERAL, SHEET_TIMESTAMP_FORMAT
)

_SUFFIX_RE = re.compile(r'^[0-9]{%d}$' % TICKET_SUFFIX_DIGITS)


def is_valid_suffix(suffix):
    """True when the suffix is exactly six ASCII digits."""
    return bool(suffix) and bool(_SUFFIX_RE.fullmatch(suffix))


def build_ticket_code(tipo, suffix):
    """
    Composes the ticket code from its type and numeric suffix.

    Example: build_ticket_code('VIP', '000123') -> 'VIP-000123'
    """
    return f"{tipo}-{suffix}"


def get_prices():
    """
    Returns (price_vip, price_general) from the app config, falling back to
    the defaults outside an application context.
    """
    try:
        config = current_app.config
    except RuntimeError:
        return DEFAULT_PRICE_VIP, DEFAULT_PRICE_GENERAL
    return (config.get('PRICE_VIP', DEFAULT_PRICE_VIP),
            config.get('PRICE_GENERAL', DEFAULT_PRICE_GENERAL))


def ticket_amount(tipo, estado, price_vip=None, price_general=None):
    """
    Derived monetary value of a ticket. Only paid tickets count.
    """
    if price_vip is None or price_general is None:
        default_vip, default_general = get_prices()
        price_vip = default_vip if price_vip is None else price_vip
        price_general = default_general if price_general is None else price_general

    if estado != PaymentStatus.PAGADO:
        return 0
    return price_vip if tipo == TicketType.VIP else price_general


def format_sheet_timestamp(moment=None, tz_name='America/Lima'):
    """
    Human-readable local timestamp written to the spreadsheet, e.g.
    '31/10/2025, 21:05:00'. Naive datetimes are taken as UTC.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).strftime(SHEET_TIMESTAMP_FORMAT)
