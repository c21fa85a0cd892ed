from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from storefront_orders.presentation.schemas import (
    CheckoutRequest, AdminStatusRequest, OrderSummaryResponse, OrderDetailResponse,
    OrderListResponse, PaginationResponse, MessageResponse, ErrorResponse
)
from storefront_orders.application.checkout import CheckoutUseCase, CheckoutDTO
from storefront_orders.application.order_lifecycle import OrderLifecycleService
from storefront_orders.application.order_queries import OrderQueryService, Page
from storefront_orders.domain.models import Actor, ActorRole, OrderStatus
from storefront_orders.domain.exceptions import (
    DomainException, CartEmptyError, CartServiceError, OrderFailedError, OrderNotFoundError,
    InvalidOrderIdError, CannotCancelError, InvalidStatusTransitionError, ReceiptRequiredError,
    UnauthorizedError, ConcurrentUpdateError
)
from storefront_orders.infrastructure.unit_of_work import UnitOfWork
from storefront_orders.infrastructure.repositories import SQLAlchemyCartRepository
from storefront_orders.infrastructure.http_clients import HTTPCartClient
from storefront_orders.database import get_session_factory
from storefront_orders.config import settings

router = APIRouter()


ERROR_STATUS = {
    CartEmptyError: status.HTTP_400_BAD_REQUEST,
    InvalidOrderIdError: status.HTTP_400_BAD_REQUEST,
    CannotCancelError: status.HTTP_400_BAD_REQUEST,
    InvalidStatusTransitionError: status.HTTP_400_BAD_REQUEST,
    ReceiptRequiredError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    OrderNotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrentUpdateError: status.HTTP_409_CONFLICT,
    OrderFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    CartServiceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def to_http(e: DomainException) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"code": e.kind, "message": e.message}
    )


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


# Идентичность приходит от gateway после аутентификации
def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: str = Header(ActorRole.CUSTOMER.value)
) -> Actor:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": UnauthorizedError.kind, "message": "Пользователь не аутентифицирован"}
        )
    try:
        role = ActorRole(x_user_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": UnauthorizedError.kind, "message": f"Неизвестная роль: {x_user_role}"}
        )
    return Actor(id=x_user_id, role=role)


def get_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Требуются права администратора"}
        )
    return actor


# Фабрики для создания use cases
def get_unit_of_work() -> UnitOfWork:
    if settings.CART_SERVICE_URL:
        cart_client = HTTPCartClient(settings.CART_SERVICE_URL, settings.API_TOKEN)
        return UnitOfWork(get_session_factory(), lambda session: cart_client)
    return UnitOfWork(get_session_factory(), SQLAlchemyCartRepository)


def get_checkout_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return CheckoutUseCase(uow, settings.ORDER_NUMBER_MAX_ATTEMPTS)


def get_lifecycle_service(uow: UnitOfWork = Depends(get_unit_of_work)):
    return OrderLifecycleService(uow)


def get_query_service(uow: UnitOfWork = Depends(get_unit_of_work)):
    return OrderQueryService(uow)


def _list_response(page: Page, **filters) -> OrderListResponse:
    return OrderListResponse(
        orders=[OrderSummaryResponse.from_domain(order) for order in page.items],
        pagination=PaginationResponse(page=page.page, limit=page.limit, total=page.total, **filters)
    )


# ==================== CUSTOMER ====================

@router.post(
    "/orders",
    response_model=OrderSummaryResponse,
    responses={**ERROR_RESPONSES, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def checkout(
    request: CheckoutRequest,
    actor: Actor = Depends(get_actor),
    use_case: CheckoutUseCase = Depends(get_checkout_use_case)
):
    """Оформить заказ из корзины"""
    try:
        order = await use_case(actor, CheckoutDTO(address_id=request.address_id, note=request.note))
        return OrderSummaryResponse.from_domain(order)
    except DomainException as e:
        raise to_http(e)


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service)
):
    """Заказы текущего пользователя"""
    result = await service.list_for_customer(actor, _to_int(page), _to_int(limit))
    return _list_response(result)


@router.get("/orders/{order_id}", response_model=OrderDetailResponse, responses=ERROR_RESPONSES)
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service)
):
    """Получить заказ с позициями"""
    try:
        order = await service.detail(order_id, actor)
        return OrderDetailResponse.from_domain(order)
    except DomainException as e:
        raise to_http(e)


@router.patch("/orders/{order_id}/cancel", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def cancel_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service)
):
    """Отменить заказ (только PENDING)"""
    try:
        await service.cancel(order_id, actor)
        return MessageResponse(message="Заказ отменен")
    except DomainException as e:
        raise to_http(e)


@router.patch("/orders/{order_id}/complete", response_model=OrderSummaryResponse, responses=ERROR_RESPONSES)
async def complete_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service)
):
    """Подтвердить получение заказа (SHIPPED -> COMPLETED)"""
    try:
        order = await service.advance_as_customer(order_id, actor, OrderStatus.COMPLETED)
        return OrderSummaryResponse.from_domain(order)
    except DomainException as e:
        raise to_http(e)


# ==================== ADMIN ====================

@router.get("/admin/orders", response_model=OrderListResponse)
async def list_orders_admin(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    actor: Actor = Depends(get_admin),
    service: OrderQueryService = Depends(get_query_service)
):
    """Все заказы с фильтрами по статусу и номеру"""
    result = await service.list_for_admin(status_filter, search, _to_int(page), _to_int(limit))
    return _list_response(result, status=status_filter, search=search)


@router.patch("/admin/orders/{order_id}/status", response_model=OrderSummaryResponse, responses=ERROR_RESPONSES)
async def update_status_admin(
    order_id: str,
    request: AdminStatusRequest,
    actor: Actor = Depends(get_admin),
    service: OrderLifecycleService = Depends(get_lifecycle_service)
):
    """Сменить статус заказа (PAID, PROCESSING, SHIPPED, ...)"""
    try:
        order = await service.advance_as_admin(order_id, actor, request.status, request.receipt_no)
        return OrderSummaryResponse.from_domain(order)
    except DomainException as e:
        raise to_http(e)
