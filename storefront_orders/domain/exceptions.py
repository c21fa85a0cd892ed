class DomainException(Exception):
    """Базовая ошибка ядра заказов: стабильный kind + сообщение для человека"""
    kind = "DOMAIN_ERROR"
    default_message = "Ошибка обработки заказа"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class CartEmptyError(DomainException):
    kind = "CART_EMPTY"
    default_message = "Корзина пуста"


class OrderFailedError(DomainException):
    kind = "ORDER_FAILED"
    default_message = "Не удалось оформить заказ, попробуйте еще раз"


class OrderNotFoundError(DomainException):
    kind = "ORDER_NOT_FOUND"
    default_message = "Заказ не найден"


class InvalidOrderIdError(DomainException):
    kind = "INVALID_ORDER_ID"
    default_message = "Некорректный формат id заказа"


class CannotCancelError(DomainException):
    kind = "CANNOT_CANCEL"
    default_message = "Заказ не может быть отменен"


class InvalidStatusTransitionError(DomainException):
    kind = "INVALID_STATUS_TRANSITION"
    default_message = "Недопустимый переход статуса"


class ReceiptRequiredError(DomainException):
    kind = "RECEIPT_REQUIRED"
    default_message = "Для отправки требуется номер накладной"


class UnauthorizedError(DomainException):
    kind = "UNAUTHORIZED"
    default_message = "Нет доступа к заказу"


class ConcurrentUpdateError(DomainException):
    kind = "CONCURRENT_UPDATE"
    default_message = "Заказ был изменен параллельно, повторите запрос"


class CartServiceError(DomainException):
    kind = "CART_SERVICE_ERROR"
    default_message = "Cart service не доступен"
