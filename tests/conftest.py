import os

# keep test runs from writing logs/mailbox_report.log
os.environ.setdefault("LOG_TO_FILE", "false")

import smtplib  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

MAILBOXES_CSV = """\
Identity,DisplayName,Server,Database,TotalItemSizeMB,TotalDeletedItemSizeMB,ItemCount,LastLogonTime,UseDatabaseQuotaDefaults,IssueWarningQuotaMB,ProhibitSendQuotaMB,ProhibitSendReceiveQuotaMB
alice@contoso.com,Alice Archer,EX01,DB01,1900,12.5,15000,2026-10-01 08:30:00,True,,,
bob@contoso.com,Bob Baker,EX01,DB01,500,0,2000,,True,,,
carol@contoso.com,Carol Chen,EX02,DB02,2600,100,40000,2026-10-15 17:00:00,True,,,
dave@contoso.com,Dave Diaz,EX02,DB02,1000,5,7000,2026-09-30 12:00:00,False,800,1000,1200
"""

FOLDERS_CSV = """\
Identity,FolderScope,FolderSizeMB
alice@contoso.com,Inbox,700
alice@contoso.com,Sent Items,200
bob@contoso.com,Inbox,120.5
carol@contoso.com,Inbox,1500
"""

DATABASES_CSV = """\
Database,IssueWarningQuotaMB,ProhibitSendQuotaMB,ProhibitSendReceiveQuotaMB
DB01,1800,2000,2300
DB02,1900,2100,2500
"""

SIZE_TABLE = [
    "<table>",
    "<colgroup><col/><col/></colgroup>",
    "<tr><th>Name</th><th>Size</th></tr>",
    "<tr><td>Alice</td><td>120</td></tr>",
    "<tr><td>Bob</td><td>50</td></tr>",
    "</table>",
]

STATUS_TABLE = [
    "<table>",
    "<tr><th>Name</th><th>Size</th><th>Status</th></tr>",
    "<tr><td>Alice</td><td>1,900.00</td><td>1</td></tr>",
    "<tr><td>Bob</td><td>500.00</td><td>0</td></tr>",
    "<tr><td>Carol</td><td>2,600.00</td><td>3</td></tr>",
    "<tr><td>Dave</td><td>1,000.00</td><td>2</td></tr>",
    "</table>",
]


@pytest.fixture
def size_table():
    return list(SIZE_TABLE)


@pytest.fixture
def status_table():
    return list(STATUS_TABLE)


@pytest.fixture
def export_dir(tmp_path) -> Path:
    (tmp_path / "mailboxes.csv").write_text(MAILBOXES_CSV, encoding="utf-8")
    (tmp_path / "folders.csv").write_text(FOLDERS_CSV, encoding="utf-8")
    (tmp_path / "databases.csv").write_text(DATABASES_CSV, encoding="utf-8")
    return tmp_path


class FakeSMTP:
    """Stands in for smtplib.SMTP; records what would have been sent."""

    sent = []
    fail_with = None

    def __init__(self, host, port=0):
        if isinstance(self.fail_with, OSError):
            raise self.fail_with
        self.host = host
        self.port = port
        self.logged_in_as = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        self.logged_in_as = user

    def send_message(self, msg):
        if isinstance(self.fail_with, smtplib.SMTPException):
            raise self.fail_with
        FakeSMTP.sent.append((self.host, self.port, msg))


@pytest.fixture
def fake_smtp(monkeypatch):
    from mailbox_reports.utils import email_sender

    FakeSMTP.sent = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(email_sender.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP
