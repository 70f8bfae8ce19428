from dataclasses import dataclass

from mailbox_reports.reports.models.mailbox_report import QuotaStatus


@dataclass(frozen=True)
class StatusStyle:
    status: QuotaStatus
    label: str
    row_color: str          # HTML color name, used by the colour rules and the legend


STATUS_THEME = {
    QuotaStatus.WARNING: StatusStyle(
        status=QuotaStatus.WARNING,
        label="Over Warning Quota",
        row_color="yellow",
    ),
    QuotaStatus.PROHIBIT_SEND: StatusStyle(
        status=QuotaStatus.PROHIBIT_SEND,
        label="Send Prohibited",
        row_color="orange",
    ),
    QuotaStatus.PROHIBIT_SEND_RECEIVE: StatusStyle(
        status=QuotaStatus.PROHIBIT_SEND_RECEIVE,
        label="Send and Receive Prohibited",
        row_color="red",
    ),
}
