# storefront/routes/orders.py
"""
Customer-facing order endpoints.
Every lookup is scoped to the logged-in account. Notifications are queued
as background tasks after the response and can never fail the request.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from storefront.dependencies import get_current_account, get_notifier, get_order_service
from storefront.models import Account, OrderWithItems
from storefront.schemas import CreateOrderRequest, ReturnRequest, StatusUpdateRequest
from storefront.services.notifications import Notifier, dispatch_best_effort
from storefront.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def queue_status_notifications(
    background_tasks: BackgroundTasks,
    notifier: Notifier,
    order: OrderWithItems,
    old_status: str,
    sms_status: Optional[str] = None,
    note: Optional[str] = None,
) -> None:
    background_tasks.add_task(dispatch_best_effort, notifier.send_status_update, order, old_status, note)
    background_tasks.add_task(
        dispatch_best_effort, notifier.send_sms, order.shipping_phone, order.order_number, sms_status or order.status.value
    )


@router.post("", status_code=201)
def create_order(
    body: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
    notifier: Notifier = Depends(get_notifier),
):
    order = orders.create_order(
        account.id,
        body.items,
        body.shipping_info,
        body.payment_info,
        shipping_cost=body.shipping_cost,
        tax=body.tax,
        subtotal=body.subtotal,
        total=body.total,
    )

    background_tasks.add_task(dispatch_best_effort, notifier.send_order_confirmation, order)
    background_tasks.add_task(dispatch_best_effort, notifier.send_sms, order.shipping_phone, order.order_number, "placed")

    return {"success": True, "message": "Order created successfully", "data": order}


@router.get("")
def list_orders(
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": orders.list_orders(account.id)}


@router.get("/{order_id}")
def get_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": orders.get_order(order_id, account.id)}


@router.patch("/{order_id}/cancel")
def cancel_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
    notifier: Notifier = Depends(get_notifier),
):
    old_status = orders.get_order(order_id, account.id).status.value
    order = orders.cancel_order(order_id, account.id)
    queue_status_notifications(background_tasks, notifier, order, old_status)
    return {"success": True, "message": "Order cancelled successfully", "data": order}


@router.patch("/{order_id}/return")
def return_order(
    order_id: int,
    body: ReturnRequest,
    background_tasks: BackgroundTasks,
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
    notifier: Notifier = Depends(get_notifier),
):
    old_status = orders.get_order(order_id, account.id).status.value
    order = orders.return_order(order_id, account.id, body.reason, body.comments)

    note = f"Reason: {body.reason}"
    if body.comments:
        note += f"\nComments: {body.comments}"
    queue_status_notifications(background_tasks, notifier, order, old_status, sms_status="return requested", note=note)

    return {
        "success": True,
        "message": "Return request submitted successfully. Refund will be processed within 5-7 business days.",
        "data": order,
    }


@router.patch("/{order_id}/status")
def request_status(
    order_id: int,
    body: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    account: Account = Depends(get_current_account),
    orders: OrderService = Depends(get_order_service),
    notifier: Notifier = Depends(get_notifier),
):
    old_status = orders.get_order(order_id, account.id).status.value
    order = orders.request_status(order_id, account.id, body.status)
    queue_status_notifications(background_tasks, notifier, order, old_status)
    return {"success": True, "message": "Order status updated successfully", "data": order}
