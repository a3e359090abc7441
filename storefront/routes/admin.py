# storefront/routes/admin.py
"""
Manager dashboard endpoints.
Every route requires an account with the admin role. Status changes here are
unguarded on purpose: staff use them to correct orders.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from storefront.dependencies import get_notifier, get_order_service, require_admin
from storefront.models import Account
from storefront.routes.orders import queue_status_notifications
from storefront.schemas import StatusUpdateRequest
from storefront.services.notifications import Notifier
from storefront.services.orders import OrderService, parse_status

router = APIRouter(prefix="/admin/orders", tags=["admin"])


# Declared before /{order_id} so "stats" is not parsed as an id
@router.get("/stats")
def order_stats(
    admin: Account = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": orders.get_order_stats()}


@router.get("")
def list_all_orders(
    admin: Account = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": orders.list_all_orders()}


@router.get("/{order_id}")
def get_order(
    order_id: int,
    admin: Account = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": orders.get_order_admin(order_id)}


@router.patch("/{order_id}/status")
def update_status(
    order_id: int,
    body: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    admin: Account = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
    notifier: Notifier = Depends(get_notifier),
):
    # An unknown status is rejected before the order lookup
    new_status = parse_status(body.status)
    old_status = orders.get_order_admin(order_id).status.value
    order = orders.update_status(order_id, new_status)

    # Only notify the customer when something actually changed
    if order.status.value != old_status:
        queue_status_notifications(background_tasks, notifier, order, old_status)

    return {"success": True, "message": f"Order status updated to {order.status.value}", "data": order}
