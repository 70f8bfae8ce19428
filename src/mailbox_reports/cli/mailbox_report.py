from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from mailbox_reports.colorize import ColumnNotFoundError, ConfigurationError
from mailbox_reports.data.directory import (
    CsvMailboxDirectory,
    MailboxNotFoundError,
    MailboxScope,
    read_identity_file,
)
from mailbox_reports.presentation.email import (
    render_mailbox_report_html,
    send_mailbox_report,
)
from mailbox_reports.services.mailbox_report import build_mailbox_report
from mailbox_reports.utils.config import config
from mailbox_reports.utils.email_sender import EmailConfig, TransportError
from mailbox_reports.utils.logger import get_logger

log = get_logger(__name__)


def _parse_recipients(value: str) -> List[str]:
    return [e.strip() for e in value.split(",") if e.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mailbox size and quota report"
    )

    selection = parser.add_mutually_exclusive_group(required=True)
    selection.add_argument("--all", action="store_true", help="Report on every mailbox.")
    selection.add_argument("--server", help="Report on mailboxes hosted on this server.")
    selection.add_argument("--database", help="Report on mailboxes in this database.")
    selection.add_argument(
        "--file",
        type=Path,
        help="Text file with one mailbox identity per line ('#' comments allowed).",
    )
    selection.add_argument("--mailbox", help="Report on a single mailbox (identity or display name).")

    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Directory export folder. Defaults to MAILBOX_EXPORT_DIR.",
    )
    parser.add_argument(
        "--folder-scope",
        default=None,
        help="Folder reported in its own size column. Defaults to FOLDER_SCOPE (Inbox).",
    )
    parser.add_argument("--output", type=Path, default=None, help="Also write the HTML report here.")

    parser.add_argument(
        "--send-email",
        action="store_true",
        help="Email the report (needs --mail-from, --mail-to and --mail-server or their env defaults).",
    )
    parser.add_argument("--mail-from", default=None, help="Sender address. Defaults to SENDER_EMAIL.")
    parser.add_argument(
        "--mail-to",
        default=None,
        help="Comma-separated recipients. Defaults to DEFAULT_RECIPIENTS.",
    )
    parser.add_argument("--mail-server", default=None, help="SMTP relay. Defaults to SMTP_SERVER.")
    return parser


def scope_from_args(args: argparse.Namespace) -> MailboxScope:
    if args.server:
        return MailboxScope(server=args.server)
    if args.database:
        return MailboxScope(database=args.database)
    if args.mailbox:
        return MailboxScope(mailbox=args.mailbox)
    if args.file:
        return MailboxScope(identities=read_identity_file(args.file))
    return MailboxScope()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Mail settings are checked up front so a long report run is not wasted
    email_config = None
    recipients: List[str] = []
    if args.send_email:
        sender = args.mail_from or config.SENDER_EMAIL
        smtp_server = args.mail_server or config.SMTP_SERVER
        recipients = _parse_recipients(args.mail_to) if args.mail_to else list(config.DEFAULT_RECIPIENTS)
        if not (sender and smtp_server and recipients):
            parser.error(
                "--send-email needs --mail-from, --mail-to and --mail-server "
                "(or SENDER_EMAIL, DEFAULT_RECIPIENTS, SMTP_SERVER in the environment)"
            )
        email_config = EmailConfig(
            smtp_server=smtp_server,
            smtp_port=config.SMTP_PORT,
            sender_email=sender,
        )

    export_dir = args.export_dir or config.MAILBOX_EXPORT_DIR
    folder_scope = args.folder_scope or config.FOLDER_SCOPE
    report_date = date.today()

    try:
        scope = scope_from_args(args)
        directory = CsvMailboxDirectory(export_dir)
        records = build_mailbox_report(directory, scope, folder_scope)
        body = render_mailbox_report_html(
            records,
            report_date,
            title=config.REPORT_TITLE,
            scope_description=scope.describe(),
        )
    except (ConfigurationError, ColumnNotFoundError) as e:
        log.error(f"Report colouring failed, nothing sent: {e}", exc_info=True)
        return 1
    except (FileNotFoundError, MailboxNotFoundError, ValueError) as e:
        log.error(f"Could not build mailbox report: {e}", exc_info=True)
        return 1

    # Always print (useful for scheduled-task logs)
    print(body)

    if args.output:
        try:
            args.output.write_text(body, encoding="utf-8")
        except OSError as e:
            log.error(f"Could not write report to {args.output}: {e}", exc_info=True)
            return 1
        log.info(f"Report written to {args.output}")

    if email_config is not None:
        try:
            send_mailbox_report(
                email_config,
                records,
                body,
                recipients,
                report_date,
                title=config.REPORT_TITLE,
            )
        except TransportError:
            log.error("Failed to send mailbox report", exc_info=True)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
