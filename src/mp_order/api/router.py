"""mp_order REST API: place, list and fetch orders; all require a buyer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_buyer_id
from src.mp_gateway.middleware.rate_limit import enforce_order_rate_limit
from src.mp_order.application.schemas import CreateOrderRequest
from src.mp_order.application.service import OrderApplicationService, get_order_service

router = APIRouter(prefix="/orders", tags=["orders"])


def _with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_order(
    body: CreateOrderRequest,
    buyer_id: Annotated[str, Depends(enforce_order_rate_limit)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.create_order(body, buyer_id, db)
    resp = success_response(data.model_dump(mode="json"))
    resp.message = "Order successfully placed"
    return _with_request_id(resp, request)


@router.get("")
async def list_orders(
    buyer_id: Annotated[str, Depends(get_current_buyer_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    data = await service.list_orders(buyer_id, limit, cursor, db)
    return _with_request_id(success_response(data.model_dump(mode="json")), request)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    buyer_id: Annotated[str, Depends(get_current_buyer_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_order(order_id, buyer_id, db)
    return _with_request_id(success_response(data.model_dump(mode="json")), request)
