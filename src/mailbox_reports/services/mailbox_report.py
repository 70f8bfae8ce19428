# src/mailbox_reports/services/mailbox_report.py
"""
Mailbox report use case.

Pulls every in-scope mailbox from the directory, computes quota status and
returns one DataFrame row per mailbox. No HTML, no SMTP.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List

import pandas as pd

from mailbox_reports.data.directory import MailboxDirectory, MailboxScope
from mailbox_reports.reports.models.mailbox_report import DatabaseQuotas, MailboxReportRecord
from mailbox_reports.services.quota import effective_quotas, quota_status
from mailbox_reports.utils.logger import get_logger

log = get_logger(__name__)


def report_columns(folder_scope: str = "Inbox") -> Dict[str, str]:
    """MailboxReportRecord field -> report column header."""
    return {
        "display_name": "DisplayName",
        "server": "Server",
        "database": "Database",
        "item_count": "ItemCount",
        "total_size_mb": "TotalSizeMB",
        "deleted_size_mb": "DeletedSizeMB",
        "folder_size_mb": f"{folder_scope.replace(' ', '')}SizeMB",
        "last_logon": "LastLogon",
        "status": "Status",
    }


def build_mailbox_records(
    directory: MailboxDirectory,
    scope: MailboxScope,
    folder_scope: str = "Inbox",
) -> List[MailboxReportRecord]:
    refs = directory.list_mailboxes(scope)

    # quota lookups are per database, not per mailbox
    database_quotas: Dict[str, DatabaseQuotas] = {}

    records: List[MailboxReportRecord] = []
    for ref in refs:
        stats = directory.get_statistics(ref)
        folder = directory.get_folder_statistics(ref, folder_scope)

        if ref.database not in database_quotas:
            database_quotas[ref.database] = directory.get_database_quotas(ref.database)
        quotas = effective_quotas(database_quotas[ref.database], directory.get_mailbox_quotas(ref))

        records.append(
            MailboxReportRecord(
                display_name=ref.display_name,
                server=ref.server,
                database=ref.database,
                item_count=stats.item_count,
                total_size_mb=stats.total_size_mb,
                deleted_size_mb=stats.deleted_size_mb,
                folder_size_mb=folder.folder_size_mb,
                last_logon=stats.last_logon,
                status=quota_status(stats.total_size_mb, quotas),
            )
        )

    over = sum(1 for r in records if r.status)
    log.info(f"Built {len(records)} mailbox record(s); {over} at or over a quota tier")
    return records


def build_mailbox_report(
    directory: MailboxDirectory,
    scope: MailboxScope,
    folder_scope: str = "Inbox",
) -> pd.DataFrame:
    """Report table, largest mailboxes first."""
    columns = report_columns(folder_scope)
    records = build_mailbox_records(directory, scope, folder_scope)

    df = pd.DataFrame([asdict(r) for r in records], columns=list(columns))
    df["status"] = df["status"].map(int)
    df = df.rename(columns=columns)
    return df.sort_values("TotalSizeMB", ascending=False, kind="stable").reset_index(drop=True)
