"""
Order Status Workflow

The dashboard moves orders forward only:

    pending ──► confirmed ──► completed
       │
       └──────► cancelled

completed and cancelled are terminal. "preparing" is a valid status that
no dashboard action leads to. None of this is enforced when a status is
written; it only decides which buttons are offered.
"""

from qrmenu.models import OrderStatus

FORWARD_ACTIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.COMPLETED,),
    OrderStatus.PREPARING: (OrderStatus.COMPLETED,),
    OrderStatus.COMPLETED: (),
    OrderStatus.CANCELLED: (),
}

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

CUSTOMER_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Waiting for confirmation",
    OrderStatus.CONFIRMED: "Being cooked",
    OrderStatus.PREPARING: "Being prepared",
    OrderStatus.COMPLETED: "Done",
    OrderStatus.CANCELLED: "Cancelled",
}


def available_actions(status: OrderStatus) -> list[OrderStatus]:
    """Statuses the dashboard offers as next step for an order."""
    return list(FORWARD_ACTIONS.get(status, ()))


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_forward_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in FORWARD_ACTIONS.get(current, ())


def customer_label(status: OrderStatus) -> str:
    return CUSTOMER_LABELS.get(status, status.value)
