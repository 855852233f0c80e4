"""Record sales and visits from the field.

A quick sale is two writes: the sale itself, then a ``sold`` visit on the
address. When the server cannot be reached, both writes go to the offline
queue and the outcome says so; the UI shows "recorded offline, will sync"
instead of an error. A server that answers with an error status is not a
connectivity problem, so that case raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.constants import (
    SALES_ENDPOINT,
    VISIT_STATUS_SOLD,
    VISIT_STATUSES,
    VISITS_ENDPOINT,
)
from core.exceptions import ExternalServiceError, TransportError
from offline.interfaces import Transport
from offline.queue import OfflineSyncQueue

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class QuickSale(BaseModel):
    """Calendars sold at one address during a tournee."""

    address_id: int
    pompier_id: int
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)
    payment_method: str = "cash"
    notes: str = ""

    @property
    def total_amount(self) -> Decimal:
        return self.unit_price * self.quantity

    def summary(self) -> str:
        text = f"Vente: {self.quantity} calendriers - {self.payment_method}"
        if self.notes:
            text = f"{text} | {self.notes}"
        return text


class VisitReport(BaseModel):
    """Outcome of knocking on one door."""

    address_id: int
    pompier_id: int
    status: str
    amount: Decimal | None = None
    payment_method: str | None = None
    comments: str | None = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in VISIT_STATUSES:
            msg = f"Unknown visit status {v!r}"
            raise ValueError(msg)
        return v


@dataclass
class RecordOutcome:
    """What happened to a recording attempt."""

    offline: bool = False
    responses: list[str] = field(default_factory=list)
    queued_ids: list[str] = field(default_factory=list)


def _amount(value: Decimal | None) -> str | None:
    return None if value is None else format(value, "f")


def sale_payload(sale: QuickSale, when: datetime) -> dict[str, Any]:
    return {
        "addressId": sale.address_id,
        "pompierId": sale.pompier_id,
        "amount": _amount(sale.total_amount),
        "paymentMethod": sale.payment_method,
        "saleDate": when.isoformat(),
    }


def visit_payload(visit: VisitReport, when: datetime) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "addressId": visit.address_id,
        "pompierId": visit.pompier_id,
        "status": visit.status,
        "visitDate": when.isoformat(),
    }
    if visit.amount is not None:
        payload["amount"] = _amount(visit.amount)
    if visit.payment_method:
        payload["paymentMethod"] = visit.payment_method
    if visit.comments:
        payload["comments"] = visit.comments
    return payload


class SaleRecorder:
    """Send field writes directly, falling back to the offline queue."""

    def __init__(self, transport: Transport, queue: OfflineSyncQueue) -> None:
        self._transport = transport
        self._queue = queue

    async def record_sale(
        self, sale: QuickSale, *, when: datetime | None = None
    ) -> RecordOutcome:
        when = when or datetime.now(UTC)
        visit = VisitReport(
            address_id=sale.address_id,
            pompier_id=sale.pompier_id,
            status=VISIT_STATUS_SOLD,
            amount=sale.total_amount,
            payment_method=sale.payment_method,
            comments=sale.summary(),
        )
        writes = [
            (SALES_ENDPOINT, sale_payload(sale, when)),
            (VISITS_ENDPOINT, visit_payload(visit, when)),
        ]
        outcome = await self._write_all(writes)
        logger.info(
            "Sale of %d calendar(s) at address %s recorded%s",
            sale.quantity,
            sale.address_id,
            " offline" if outcome.offline else "",
        )
        return outcome

    async def record_visit(
        self, visit: VisitReport, *, when: datetime | None = None
    ) -> RecordOutcome:
        when = when or datetime.now(UTC)
        return await self._write_all([(VISITS_ENDPOINT, visit_payload(visit, when))])

    async def _write_all(
        self, writes: list[tuple[str, dict[str, Any]]]
    ) -> RecordOutcome:
        outcome = RecordOutcome()
        for index, (url, payload) in enumerate(writes):
            try:
                response = await self._transport.send(
                    url, "POST", dict(JSON_HEADERS), json.dumps(payload)
                )
            except TransportError as e:
                logger.warning("Direct write to %s failed, queuing: %s", url, e)
                outcome.offline = True
                # This write and every one after it waits for the reconnect
                for queued_url, queued_payload in writes[index:]:
                    pending = await self._queue.enqueue(
                        queued_url,
                        "POST",
                        dict(JSON_HEADERS),
                        json.dumps(queued_payload),
                    )
                    outcome.queued_ids.append(pending.id)
                break

            if not response.ok:
                msg = f"Server rejected POST {url}: {response.status}"
                raise ExternalServiceError(
                    msg, {"status": response.status, "body": response.body}
                )
            outcome.responses.append(response.body)
        return outcome
