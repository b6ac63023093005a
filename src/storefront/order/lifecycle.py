"""Order lifecycle: status and payment status changes after checkout.

Every change is checked against the transition tables on the Order. Cancelling
returns each detail's quantity to stock in the same unit of work as the status
change, so a cancellation either restocks everything once or nothing at all.
"""

import structlog

from storefront.config import CURRENCY
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.payment.gateway import get_gateway
from storefront.payment.gateway.port import PaymentGateway, PaymentOutcome
from storefront.persistence import get_store
from storefront.persistence.errors import StorageFault
from storefront.persistence.unit_of_work import DataStore, UnitOfWork
from storefront.shared.money import to_money
from storefront.shared.result import ErrorKind, Result

logger = structlog.get_logger(__name__)


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    return enum_cls(value)


class OrderLifecycle:
    def __init__(self, store: DataStore | None = None, gateway: PaymentGateway | None = None) -> None:
        self._store = store or get_store()
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    ###########################
    # Order status
    ###########################
    def update_order_status(self, order_id, new_status) -> Result:
        try:
            target = _coerce(OrderStatus, new_status)
        except ValueError:
            return Result.fail(ErrorKind.VALIDATION_FAILURE, f"Unknown order status '{new_status}'")

        with self._store.begin() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")

            if not order.can_transition_to(target):
                return Result.fail(
                    ErrorKind.INVALID_STATUS_TRANSITION,
                    f"Order {order.order_number} cannot move from {order.status} to {target.value}",
                )

            previous = order.status
            order.transition_to(target)
            if target is OrderStatus.CANCELLED:
                self._restock(uow, order)

            uow.orders.update(order)
            result = uow.commit()

        if result.success:
            logger.info(
                "Order status changed",
                order_id=str(order.id),
                order_number=order.order_number,
                from_status=previous,
                to_status=target.value,
            )
        return result

    def cancel_order(self, order_id) -> Result:
        return self.update_order_status(order_id, OrderStatus.CANCELLED)

    def _restock(self, uow: UnitOfWork, order: Order) -> None:
        for detail in uow.order_details.get_all(order_id=str(order.id)):
            uow.products.increment_stock(detail.product_id, detail.quantity)

    ###########################
    # Payment status
    ###########################
    def update_payment_status(self, order_id, new_status) -> Result:
        try:
            target = _coerce(PaymentStatus, new_status)
        except ValueError:
            return Result.fail(ErrorKind.VALIDATION_FAILURE, f"Unknown payment status '{new_status}'")

        with self._store.begin() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")

            failure = self._check_payment_transition(order, target)
            if failure is not None:
                return failure

            previous = order.payment_status
            order.transition_payment_to(target)
            uow.orders.update(order)
            result = uow.commit()

        if result.success:
            logger.info(
                "Payment status changed",
                order_id=str(order.id),
                order_number=order.order_number,
                from_status=previous,
                to_status=target.value,
            )
        return result

    def capture_payment(self, order_id) -> Result:
        """Charge the order total through the gateway and mark the order paid."""
        with self._store.begin() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")

            failure = self._check_payment_transition(order, PaymentStatus.PAID)
            if failure is not None:
                return failure

            outcome = self.gateway.charge(
                order_number=order.order_number,
                amount=order.total_amount,
                currency=CURRENCY,
                payment_method=order.payment_method,
            )
            if not outcome.success:
                logger.warning("Payment declined", order_number=order.order_number, reason=outcome.failure_reason)
                return Result.fail(
                    ErrorKind.PAYMENT_DECLINED,
                    f"Payment for order {order.order_number} was declined: {outcome.failure_reason}",
                )

            order.transition_payment_to(PaymentStatus.PAID)
            uow.orders.update(order)
            try:
                result = uow.commit()
            except StorageFault:
                self._return_charge(order, outcome, "storage failure")
                raise

        if result.failed:
            self._return_charge(order, outcome, result.message)
            return result

        logger.info(
            "Payment captured",
            order_number=order.order_number,
            amount=order.total_amount,
            transaction_id=outcome.transaction_id,
        )
        return Result.ok(f"Payment for order {order.order_number} captured")

    def refund_payment(self, order_id, amount: float | None = None) -> Result:
        """Refund a paid order, fully when no amount is given."""
        with self._store.begin() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")

            refund_amount = to_money(order.total_amount if amount is None else amount)
            if refund_amount <= 0 or refund_amount > order.total_amount:
                return Result.fail(
                    ErrorKind.VALIDATION_FAILURE,
                    f"amount: Refund must be between 0 and {order.total_amount}",
                )

            target = PaymentStatus.REFUNDED if refund_amount == order.total_amount else PaymentStatus.PARTIALLY_REFUNDED
            failure = self._check_payment_transition(order, target)
            if failure is not None:
                return failure

            outcome = self.gateway.refund(order_number=order.order_number, amount=refund_amount, currency=CURRENCY)
            if not outcome.success:
                logger.warning("Refund declined", order_number=order.order_number, reason=outcome.failure_reason)
                return Result.fail(
                    ErrorKind.PAYMENT_DECLINED,
                    f"Refund for order {order.order_number} was declined: {outcome.failure_reason}",
                )

            order.transition_payment_to(target)
            uow.orders.update(order)
            try:
                result = uow.commit()
            except StorageFault:
                self._report_unrecorded_refund(order, refund_amount, outcome, "storage failure")
                raise

        if result.failed:
            self._report_unrecorded_refund(order, refund_amount, outcome, result.message)
            return result

        logger.info("Payment refunded", order_number=order.order_number, amount=refund_amount, status=target.value)
        return result

    def _return_charge(self, order: Order, charge: PaymentOutcome, reason: str) -> None:
        """Refund a charge whose order update could not be saved."""
        logger.warning(
            "Payment captured but the order was not updated, refunding",
            order_number=order.order_number,
            transaction_id=charge.transaction_id,
            reason=reason,
        )
        refund = self.gateway.refund(order_number=order.order_number, amount=order.total_amount, currency=CURRENCY)
        if not refund.success:
            logger.error(
                "Compensating refund failed, payment needs reconciliation",
                order_number=order.order_number,
                transaction_id=charge.transaction_id,
                amount=order.total_amount,
                reason=refund.failure_reason,
            )

    def _report_unrecorded_refund(self, order: Order, amount: float, refund: PaymentOutcome, reason: str) -> None:
        # A refund cannot be taken back; the gateway record has to be reconciled by hand
        logger.error(
            "Refund issued but the order was not updated, payment needs reconciliation",
            order_number=order.order_number,
            transaction_id=refund.transaction_id,
            amount=amount,
            reason=reason,
        )

    def _check_payment_transition(self, order: Order, target: PaymentStatus) -> Result | None:
        if target is PaymentStatus.PAID and order.current_status is OrderStatus.CANCELLED:
            return Result.fail(
                ErrorKind.INVALID_STATUS_TRANSITION,
                f"Order {order.order_number} is cancelled and cannot be paid",
            )
        if not order.can_transition_payment_to(target):
            return Result.fail(
                ErrorKind.INVALID_STATUS_TRANSITION,
                f"Payment of order {order.order_number} cannot move from {order.payment_status} to {target.value}",
            )
        return None
