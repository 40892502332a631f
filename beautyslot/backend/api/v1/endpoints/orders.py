"""
Shop Orders API Endpoints.
"""

from fastapi import APIRouter

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.models.order import ShopOrder
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.schemas.order import OrderCreate, OrderListResponse, OrderUpdate
from beautyslot.backend.services.order import OrderService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[OrderListResponse],
    summary="List orders",
    description="All shop orders newest first, with order statistics.",
)
async def list_orders(request_id: RequestId) -> ApiResponse[OrderListResponse]:
    return ApiResponse(data=OrderService().list_orders())


@router.post(
    "",
    response_model=ApiResponse[ShopOrder],
    status_code=201,
    summary="Create an order",
    description="Place an order from the shop cart and notify the salon admin.",
)
async def create_order(
    data: OrderCreate,
    request_id: RequestId,
) -> ApiResponse[ShopOrder]:
    """Create a shop order."""
    return ApiResponse(data=await OrderService().create_order(data))


@router.get(
    "/{order_id}",
    response_model=ApiResponse[ShopOrder],
    summary="Get an order",
)
async def get_order(
    order_id: str,
    request_id: RequestId,
) -> ApiResponse[ShopOrder]:
    return ApiResponse(data=OrderService().get_order(order_id))


@router.patch(
    "/{order_id}",
    response_model=ApiResponse[ShopOrder],
    summary="Update an order",
    description="Change the order status and/or notes.",
)
async def update_order(
    order_id: str,
    data: OrderUpdate,
    request_id: RequestId,
) -> ApiResponse[ShopOrder]:
    return ApiResponse(data=OrderService().update_order(order_id, data))
