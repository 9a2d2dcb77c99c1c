"""
Delinquency of receivables and clients.

Overdue is a derived state: a receivable is overdue when it is still pending
and its due date is before the reference date. Nothing here is stored or
cached; every call recomputes from (status, due_date, as_of).
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .models import Receivable

DANGER = 'danger'
WARNING = 'warning'
OK = 'ok'

# Business policy thresholds, in days overdue
WARNING_THRESHOLD_DAYS = 20
DANGER_THRESHOLD_DAYS = 30


@dataclass(frozen=True)
class OverdueReceivable:
    receivable_id: int
    client_id: Optional[int]
    due_date: date
    overdue_days: int
    classification: str


@dataclass(frozen=True)
class ClientDelinquency:
    client_id: int
    overdue_days: int
    overdue_count: int
    classification: str


@dataclass(frozen=True)
class OverdueReport:
    receivables: list
    clients: dict

    def for_client(self, client_id):
        return self.clients.get(client_id)


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def overdue_days(status, due_date, as_of):
    """Whole days a receivable is past due on `as_of`, never negative"""
    if status != Receivable.STATUS_PENDING or not due_date:
        return 0
    due_date = _as_date(due_date)
    as_of = _as_date(as_of)
    if due_date >= as_of:
        return 0
    return max(0, (as_of - due_date).days)


def classify(days):
    if days > DANGER_THRESHOLD_DAYS:
        return DANGER
    if days >= WARNING_THRESHOLD_DAYS:
        return WARNING
    return OK


def compute_overdue(receivables, as_of):
    """
    Compute overdue rows and per-client aggregates.

    Args:
        receivables: iterable of Receivable instances (or objects exposing
            id, client_id, status and due_date)
        as_of: reference date

    Returns:
        OverdueReport with the overdue receivables (in input order) and a
        dict of ClientDelinquency keyed by client id. A client's overdue
        days is the maximum across its overdue receivables.
    """
    rows = []
    per_client = {}

    for receivable in receivables:
        days = overdue_days(receivable.status, receivable.due_date, as_of)
        if days == 0:
            continue
        rows.append(
            OverdueReceivable(
                receivable_id=receivable.id,
                client_id=receivable.client_id,
                due_date=_as_date(receivable.due_date),
                overdue_days=days,
                classification=classify(days),
            )
        )
        if receivable.client_id is None:
            continue
        max_days, count = per_client.get(receivable.client_id, (0, 0))
        per_client[receivable.client_id] = (max(max_days, days), count + 1)

    clients = {
        client_id: ClientDelinquency(
            client_id=client_id,
            overdue_days=days,
            overdue_count=count,
            classification=classify(days),
        )
        for client_id, (days, count) in per_client.items()
    }
    return OverdueReport(receivables=rows, clients=clients)
