"""
Optimistic dashboard commands with undo
"""
from typing import List, Optional

from qr_order.schemas.order import OrderResponse


class StatusUpdateCommand:
    """
    Flip an order's status locally, then confirm it remotely

    apply() swaps in the new status immediately and keeps a snapshot of the
    previous order list; undo() restores that snapshot. execute() does both
    around the API call and re-raises the failure after undoing.
    """

    def __init__(self, state, order_id: str, status: str):
        self.state = state
        self.order_id = order_id
        self.status = status
        self._snapshot: Optional[List[OrderResponse]] = None

    def apply(self) -> None:
        self._snapshot = list(self.state.orders)
        self.state.orders = [
            o.model_copy(update={"status": self.status}) if o.id == self.order_id else o
            for o in self.state.orders
        ]

    def undo(self) -> None:
        if self._snapshot is None:
            return
        self.state.orders = self._snapshot
        self._snapshot = None

    async def execute(self, client) -> OrderResponse:
        self.apply()
        try:
            return await client.update_status(self.order_id, self.status)
        except Exception:
            self.undo()
            raise
