# src/mailbox_reports/utils/config.py
"""
Settings for the mailbox report, read once from the environment / .env.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")


def _split_addresses(value: str) -> list:
    return [e.strip() for e in value.split(",") if e.strip()]


class Config:
    SMTP_SERVER = os.getenv("SMTP_SERVER", "").strip()
    SMTP_PORT = int(os.getenv("SMTP_PORT", "25"))
    SENDER_EMAIL = os.getenv("SENDER_EMAIL", "").strip()
    DEFAULT_RECIPIENTS = _split_addresses(os.getenv("DEFAULT_RECIPIENTS", ""))

    # Directory export written by the mail admin tooling (mailboxes.csv, folders.csv, databases.csv)
    MAILBOX_EXPORT_DIR = Path(os.getenv("MAILBOX_EXPORT_DIR", BASE_DIR / "export"))

    # Folder whose size gets its own report column
    FOLDER_SCOPE = os.getenv("FOLDER_SCOPE", "Inbox")

    REPORT_TITLE = os.getenv("REPORT_TITLE", "Mailbox Report")

    def __repr__(self):
        return f"<Config smtp={self.SMTP_SERVER}:{self.SMTP_PORT} export={self.MAILBOX_EXPORT_DIR}>"


# Singleton
config = Config()
