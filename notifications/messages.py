"""
Customer facing notifications and the per-table state the poller keeps
between runs.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from django.utils import timezone

CUSTOMER = "customer"
RESTAURANT = "restaurant"

# Categories
ORDER = "order"
STAFF_CALL = "staff-call"
PAYMENT_REQUEST = "payment-request"

# Kinds
ORDER_PLACED = "order-placed"
STAFF_CALL_CREATED = "staff-call-created"
PAYMENT_REQUEST_CREATED = "payment-request-created"
REQUEST_RECEIVED = "request-received"
ORDER_CONFIRMED = "order-confirmed"
ORDER_CANCELLED = "order-cancelled"
STAFF_CALL_ACKNOWLEDGED = "staff-call-acknowledged"
PAYMENT_REQUEST_PROCESSING = "payment-request-processing"

RECEIVED_TEXT = "The restaurant has received your request"
CONFIRMED_TEXT = "The restaurant has confirmed your request"
CANCELLED_TEXT = "The restaurant has cancelled your order"

# TableState.statuses keys
TRACKED_GROUPS = ("orders", "staff_calls", "payment_requests")


@dataclass
class Notification:
    sender: str
    content: str
    category: str
    kind: str
    related_id: Optional[int] = None
    status: Optional[str] = None
    id: str = field(default_factory=lambda: f"msg_{uuid.uuid4().hex[:12]}")
    timestamp: str = field(default_factory=lambda: timezone.now().isoformat())

    def to_dict(self):
        return {
            "id": self.id,
            "sender": self.sender,
            "content": self.content,
            "category": self.category,
            "kind": self.kind,
            "relatedId": self.related_id,
            "status": self.status,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            sender=data["sender"],
            content=data["content"],
            category=data["category"],
            kind=data["kind"],
            related_id=data.get("relatedId"),
            status=data.get("status"),
            timestamp=data["timestamp"],
        )


def _empty_statuses():
    return {group: {} for group in TRACKED_GROUPS}


@dataclass
class TableState:
    """Notification log plus the last observed status of every tracked record."""

    notifications: List[Notification] = field(default_factory=list)
    statuses: Dict[str, Dict[int, str]] = field(default_factory=_empty_statuses)
    table_status: Optional[str] = None

    def reset(self):
        self.notifications = []
        self.statuses = _empty_statuses()

    def to_dict(self):
        return {
            "notifications": [n.to_dict() for n in self.notifications],
            # JSON object keys are strings
            "statuses": {
                group: {str(pk): status for pk, status in records.items()}
                for group, records in self.statuses.items()
            },
            "tableStatus": self.table_status,
        }

    @classmethod
    def from_dict(cls, data):
        statuses = _empty_statuses()
        for group, records in (data.get("statuses") or {}).items():
            if group in statuses:
                statuses[group] = {int(pk): status for pk, status in records.items()}

        return cls(
            notifications=[Notification.from_dict(n) for n in data.get("notifications", [])],
            statuses=statuses,
            table_status=data.get("tableStatus"),
        )


# ----------------------------
# Customer side texts
# ----------------------------

def describe_order(order):
    lines = ", ".join(
        f"{item['itemName']} x{item['quantity']}" for item in order.get("orderItems", [])
    )
    return f"Ordered: {lines}" if lines else "Ordered"


def describe_staff_call(staff_call):
    return f"Called staff: {staff_call['reason']}"


def describe_payment_request(payment_request):
    return f"Requested payment: {payment_request['paymentMethod']}"
