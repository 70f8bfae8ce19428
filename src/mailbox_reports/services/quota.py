# src/mailbox_reports/services/quota.py
from __future__ import annotations

from typing import Optional

from mailbox_reports.reports.models.mailbox_report import DatabaseQuotas, QuotaStatus


def _reached(size_mb: float, limit_mb: Optional[float]) -> bool:
    return limit_mb is not None and size_mb >= limit_mb


def quota_status(size_mb: float, quotas: DatabaseQuotas) -> QuotaStatus:
    """
    Highest quota tier the mailbox has reached.

    Tiers are checked from the top down so a mailbox past prohibit-send-receive
    reports 3 even if the lower limits were left unlimited.
    """
    if _reached(size_mb, quotas.prohibit_send_receive_mb):
        return QuotaStatus.PROHIBIT_SEND_RECEIVE
    if _reached(size_mb, quotas.prohibit_send_mb):
        return QuotaStatus.PROHIBIT_SEND
    if _reached(size_mb, quotas.warn_mb):
        return QuotaStatus.WARNING
    return QuotaStatus.OK


def effective_quotas(
    database_quotas: DatabaseQuotas,
    mailbox_quotas: Optional[DatabaseQuotas],
) -> DatabaseQuotas:
    """Mailbox-level quotas replace the database defaults when the mailbox has them."""
    return mailbox_quotas if mailbox_quotas is not None else database_quotas
