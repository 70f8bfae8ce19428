"""
Mailbox directory access layer.

The report only needs four questions answered: which mailboxes are in scope,
how big each one is, how big one of its folders is, and what quotas apply.
``MailboxDirectory`` is that contract. ``CsvMailboxDirectory`` answers it from
the CSV export the mail admin tooling drops on a share:

  - mailboxes.csv  Identity, DisplayName, Server, Database, TotalItemSizeMB,
                   TotalDeletedItemSizeMB, ItemCount, LastLogonTime
                   (+ optional UseDatabaseQuotaDefaults, IssueWarningQuotaMB,
                   ProhibitSendQuotaMB, ProhibitSendReceiveQuotaMB)
  - folders.csv    Identity, FolderScope, FolderSizeMB
  - databases.csv  Database, IssueWarningQuotaMB, ProhibitSendQuotaMB,
                   ProhibitSendReceiveQuotaMB   (blank = unlimited)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

import pandas as pd

from mailbox_reports.reports.models.mailbox_report import (
    DatabaseQuotas,
    FolderStatistics,
    MailboxRef,
    MailboxStatistics,
)
from mailbox_reports.utils.logger import get_logger

log = get_logger(__name__)

QUOTA_COLUMNS = ("IssueWarningQuotaMB", "ProhibitSendQuotaMB", "ProhibitSendReceiveQuotaMB")


class MailboxNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class MailboxScope:
    """Which mailboxes a report covers. No fields set = every mailbox."""
    server: Optional[str] = None
    database: Optional[str] = None
    mailbox: Optional[str] = None
    identities: Optional[Tuple[str, ...]] = None

    def describe(self) -> str:
        if self.server:
            return f"server {self.server}"
        if self.database:
            return f"database {self.database}"
        if self.mailbox:
            return f"mailbox {self.mailbox}"
        if self.identities is not None:
            return f"{len(self.identities)} listed mailbox(es)"
        return "all mailboxes"


class MailboxDirectory(Protocol):
    def list_mailboxes(self, scope: MailboxScope) -> List[MailboxRef]: ...

    def get_statistics(self, ref: MailboxRef) -> MailboxStatistics: ...

    def get_folder_statistics(self, ref: MailboxRef, folder_scope: str) -> FolderStatistics: ...

    def get_database_quotas(self, database: str) -> DatabaseQuotas: ...

    def get_mailbox_quotas(self, ref: MailboxRef) -> Optional[DatabaseQuotas]: ...


# ------------------------------------------------------------
# Value helpers (CSV cells come back as NaN when blank)
# ------------------------------------------------------------
def _optional_float(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def _as_bool(value, default: bool = True) -> bool:
    if pd.isna(value):
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "$true")
    return bool(value)


def _quotas_from_row(row: pd.Series) -> DatabaseQuotas:
    warn, send, send_receive = (_optional_float(row.get(c)) for c in QUOTA_COLUMNS)
    return DatabaseQuotas(warn_mb=warn, prohibit_send_mb=send, prohibit_send_receive_mb=send_receive)


class CsvMailboxDirectory:
    def __init__(self, export_dir: Path | str):
        self.export_dir = Path(export_dir)
        self._mailboxes: Optional[pd.DataFrame] = None
        self._folders: Optional[pd.DataFrame] = None
        self._databases: Optional[pd.DataFrame] = None

    def __repr__(self):
        return f"<CsvMailboxDirectory {self.export_dir}>"

    def _read(self, name: str, required: Tuple[str, ...]) -> pd.DataFrame:
        path = self.export_dir / name
        if not path.exists():
            raise FileNotFoundError(f"Directory export not found: {path}")
        df = pd.read_csv(
            path,
            dtype={"Identity": str, "DisplayName": str, "Server": str, "Database": str, "FolderScope": str},
        )
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(f"{path} is missing column(s): {', '.join(missing)}")
        log.debug(f"Loaded {len(df)} row(s) from {path}")
        return df

    @property
    def mailboxes(self) -> pd.DataFrame:
        if self._mailboxes is None:
            df = self._read(
                "mailboxes.csv",
                ("Identity", "DisplayName", "Server", "Database",
                 "TotalItemSizeMB", "TotalDeletedItemSizeMB", "ItemCount", "LastLogonTime"),
            )
            df["LastLogonTime"] = pd.to_datetime(df["LastLogonTime"], errors="coerce")
            # first row wins if the export lists a mailbox twice
            df = df[~df["Identity"].str.lower().duplicated()]
            self._mailboxes = df.set_index(df["Identity"].str.lower(), drop=False)
        return self._mailboxes

    @property
    def folders(self) -> pd.DataFrame:
        if self._folders is None:
            self._folders = self._read("folders.csv", ("Identity", "FolderScope", "FolderSizeMB"))
        return self._folders

    @property
    def databases(self) -> pd.DataFrame:
        if self._databases is None:
            df = self._read("databases.csv", ("Database",) + QUOTA_COLUMNS)
            self._databases = df.set_index(df["Database"].str.lower(), drop=False)
        return self._databases

    # --------------------------------------------------
    # MailboxDirectory
    # --------------------------------------------------
    def list_mailboxes(self, scope: MailboxScope) -> List[MailboxRef]:
        df = self.mailboxes

        if scope.server:
            df = df[df["Server"].str.lower() == scope.server.lower()]
        elif scope.database:
            df = df[df["Database"].str.lower() == scope.database.lower()]
        elif scope.mailbox:
            wanted = scope.mailbox.lower()
            df = df[(df["Identity"].str.lower() == wanted) | (df["DisplayName"].str.lower() == wanted)]
            if df.empty:
                raise MailboxNotFoundError(f"Mailbox not found: {scope.mailbox}")
        elif scope.identities is not None:
            wanted = [i.lower() for i in scope.identities]
            unknown = [i for i, key in zip(scope.identities, wanted) if key not in df.index]
            for identity in unknown:
                log.warning(f"Mailbox not found, skipping: {identity}")
            df = df.loc[[key for key in dict.fromkeys(wanted) if key in df.index]]

        refs = [
            MailboxRef(
                identity=str(row["Identity"]),
                display_name=str(row["DisplayName"]),
                server=str(row["Server"]),
                database=str(row["Database"]),
            )
            for _, row in df.iterrows()
        ]
        log.info(f"{len(refs)} mailbox(es) in scope ({scope.describe()})")
        return refs

    def _row(self, ref: MailboxRef) -> pd.Series:
        key = ref.identity.lower()
        if key not in self.mailboxes.index:
            raise MailboxNotFoundError(f"Mailbox not found: {ref.identity}")
        return self.mailboxes.loc[key]

    def get_statistics(self, ref: MailboxRef) -> MailboxStatistics:
        row = self._row(ref)
        last_logon = row["LastLogonTime"]
        return MailboxStatistics(
            total_size_mb=_optional_float(row["TotalItemSizeMB"]) or 0.0,
            deleted_size_mb=_optional_float(row["TotalDeletedItemSizeMB"]) or 0.0,
            item_count=0 if pd.isna(row["ItemCount"]) else int(row["ItemCount"]),
            last_logon=None if pd.isna(last_logon) else last_logon.to_pydatetime(),
        )

    def get_folder_statistics(self, ref: MailboxRef, folder_scope: str) -> FolderStatistics:
        df = self.folders
        mask = (df["Identity"].str.lower() == ref.identity.lower()) & (
            df["FolderScope"].str.lower() == folder_scope.lower()
        )
        return FolderStatistics(folder_size_mb=float(df.loc[mask, "FolderSizeMB"].fillna(0).sum()))

    def get_database_quotas(self, database: str) -> DatabaseQuotas:
        key = database.lower()
        if key not in self.databases.index:
            log.warning(f"No quota settings exported for database {database}; treating as unlimited")
            return DatabaseQuotas()
        return _quotas_from_row(self.databases.loc[key])

    def get_mailbox_quotas(self, ref: MailboxRef) -> Optional[DatabaseQuotas]:
        """Mailbox-level quotas, or None when the mailbox uses its database defaults."""
        row = self._row(ref)
        if _as_bool(row.get("UseDatabaseQuotaDefaults"), default=True):
            return None
        return _quotas_from_row(row)


def read_identity_file(path: Path | str) -> Tuple[str, ...]:
    """One identity per line; blank lines and '#' comments are skipped."""
    identities = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                identities.append(line)
    return tuple(identities)

