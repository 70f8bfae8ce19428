from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Optional


class QuotaStatus(IntEnum):
    OK = 0
    WARNING = 1
    PROHIBIT_SEND = 2
    PROHIBIT_SEND_RECEIVE = 3


@dataclass(frozen=True)
class MailboxRef:
    identity: str
    display_name: str
    server: str
    database: str


@dataclass(frozen=True)
class MailboxStatistics:
    total_size_mb: float
    deleted_size_mb: float
    item_count: int
    last_logon: Optional[datetime]


@dataclass(frozen=True)
class FolderStatistics:
    folder_size_mb: float


@dataclass(frozen=True)
class DatabaseQuotas:
    # None = unlimited
    warn_mb: Optional[float] = None
    prohibit_send_mb: Optional[float] = None
    prohibit_send_receive_mb: Optional[float] = None


@dataclass
class MailboxReportRecord:
    display_name: str
    server: str
    database: str
    item_count: int
    total_size_mb: float
    deleted_size_mb: float
    folder_size_mb: float
    last_logon: Optional[datetime]
    status: QuotaStatus
