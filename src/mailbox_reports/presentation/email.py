# src/mailbox_reports/presentation/email.py
from __future__ import annotations

import html
from datetime import date
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from mailbox_reports.colorize import ColorRule, apply_rules
from mailbox_reports.presentation.html_table import to_html_table
from mailbox_reports.reports.models.mailbox_report import QuotaStatus
from mailbox_reports.reports.models.status_theme import STATUS_THEME
from mailbox_reports.utils.email_sender import EmailConfig, send_email
from mailbox_reports.utils.logger import get_logger

log = get_logger(__name__)

# Whole-row highlight per quota tier; later rules win on the same row.
DEFAULT_COLOR_RULES: List[ColorRule] = [
    ColorRule("Status", style.row_color, f"Status -eq {int(status)}", row_scope=True)
    for status, style in sorted(STATUS_THEME.items())
]

REPORT_STYLE = """
<style>
  body { font-family: Calibri, Arial, sans-serif; font-size: 10pt; color: #333; }
  h2 { color: #2c3e50; }
  table { border-collapse: collapse; }
  th { background: #2c3e50; color: white; padding: 4px 8px; border: 1px solid #999; }
  td { padding: 4px 8px; border: 1px solid #ccc; }
</style>
"""


def build_subject(report_date: date, title: str = "Mailbox Report") -> str:
    return f"{title} - {report_date.isoformat()}"


def _legend_html() -> str:
    items = [
        f'<span style="background-color:{style.row_color};padding:2px 6px;">'
        f"{int(status)} = {html.escape(style.label)}</span>"
        for status, style in sorted(STATUS_THEME.items())
    ]
    return "<p><strong>Status:</strong> " + " &nbsp; ".join(items) + "</p>"


def render_mailbox_report_html(
    records: pd.DataFrame,
    report_date: date,
    rules: Optional[Sequence[ColorRule]] = None,
    title: str = "Mailbox Report",
    scope_description: str = "",
) -> str:
    """
    Full HTML document: heading, legend and the colour-coded table.

    Rule errors (ConfigurationError / ColumnNotFoundError) propagate; a
    half-coloured report is never returned.
    """
    rules = DEFAULT_COLOR_RULES if rules is None else rules
    table = apply_rules("\n".join(to_html_table(records)), rules)

    subtitle = f"{len(records)} mailbox(es)"
    if scope_description:
        subtitle += f" &middot; {html.escape(scope_description)}"

    return "\n".join(
        [
            "<html>",
            "<head>",
            f"<title>{html.escape(title)}</title>",
            REPORT_STYLE.strip(),
            "</head>",
            "<body>",
            f"<h2>{html.escape(build_subject(report_date, title))}</h2>",
            f"<p>{subtitle}</p>",
            _legend_html(),
            table,
            '<p style="color:#95a5a6;font-size:85%;">Automated &bull; Messaging Operations</p>',
            "</body>",
            "</html>",
        ]
    )


def render_plain_text_summary(records: pd.DataFrame, report_date: date) -> str:
    """Plain text fallback for mail clients that do not render HTML."""
    lines = [f"Mailbox Report for {report_date.strftime('%B %d, %Y')}", ""]
    lines.append(f"Mailboxes reported: {len(records)}")
    if "Status" in records.columns:
        for status, style in sorted(STATUS_THEME.items()):
            count = int((records["Status"] == int(status)).sum())
            lines.append(f"• {style.label}: {count}")
        ok = int((records["Status"] == int(QuotaStatus.OK)).sum())
        lines.append(f"• Under quota: {ok}")
    lines.extend(["", "Open this message in an HTML-capable client to see the full report."])
    return "\n".join(lines)


def send_mailbox_report(
    email_config: EmailConfig,
    records: pd.DataFrame,
    html_body: str,
    recipients: Iterable[str],
    report_date: date,
    title: str = "Mailbox Report",
) -> None:
    recipients = list(recipients)
    send_email(
        email_config,
        subject=build_subject(report_date, title),
        body=render_plain_text_summary(records, report_date),
        recipients=recipients,
        html_body=html_body,
    )
    log.info(f"Mailbox report ({len(records)} mailboxes) sent to: {', '.join(recipients)}")
