# tradedesk/settlement.py
"""
Order settlement pipeline.

A trade request flows through the pricer, the funds/holdings validator, the
order recorder, the settlement engine and the transaction logger. All writes
happen inside one database transaction: either the order, the ledger changes,
the audit row and the fill notification are committed together or nothing is.

Balance and holding rows are read with ``SELECT ... FOR UPDATE`` and carry a
version column, so a concurrent writer either waits for the lock or fails the
optimistic version check instead of silently overwriting the ledger.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from tradedesk.errors import (
    ConcurrentModificationError,
    DatabaseError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidOrderStateError,
    NotFoundError,
    TradingError,
    ValidationError,
)
from tradedesk.models import Agent, Balance, Holding, Notification, Order, Transaction
from tradedesk.schemas import OrderRequest
from logger import logger

DEFAULT_FEE_RATE = Decimal("0.001")

# pending is the only non-terminal status
ORDER_TRANSITIONS = {
    "pending": {"filled", "cancelled", "expired"},
    "filled": set(),
    "cancelled": set(),
    "expired": set(),
}


@dataclass(frozen=True)
class SettlementConfig:
    fee_rate: Decimal = DEFAULT_FEE_RATE
    currency: str = "USD"


@dataclass(frozen=True)
class Execution:
    """Economic figures of a priced order."""
    side: str
    amount: Decimal
    price: Decimal
    notional: Decimal
    fee: Decimal

    @property
    def net_amount(self) -> Decimal:
        """Cash debited for a buy, cash credited for a sell."""
        if self.side == "buy":
            return self.notional + self.fee
        return self.notional - self.fee


def calculate_fee(notional: Decimal, fee_rate: Decimal = DEFAULT_FEE_RATE) -> Decimal:
    """
    Computes the flat-rate transaction fee for a trade.

    Args:
        notional (Decimal): Gross trade value (amount x price).
        fee_rate (Decimal): Fraction of the notional charged as fee.

    Returns:
        Decimal: The fee.
    """
    return notional * fee_rate


def transition_order(order: Order, new_status: str) -> Order:
    """
    Moves an order to a new status, enforcing one-directional transitions.

    Raises:
        InvalidOrderStateError: If the order cannot move to ``new_status``.
    """
    if new_status not in ORDER_TRANSITIONS.get(order.status, set()):
        raise InvalidOrderStateError(order.id, order.status)
    order.status = new_status
    return order


class OrderSettlementService:
    """Prices, validates, records and settles orders for one database session."""

    def __init__(self, db: Session, config: Optional[SettlementConfig] = None):
        self.db = db
        self.config = config or SettlementConfig()

    # Pricer

    def resolve_price(self, request: OrderRequest) -> Tuple[Agent, Decimal]:
        agent = self.db.get(Agent, request.agent_id)
        if agent is None:
            raise NotFoundError("Agent not found", agent_id=request.agent_id)

        if request.type == "market":
            return agent, Decimal(agent.price)

        if request.price is None:
            raise ValidationError(
                f"Price is required for {request.type} orders", field="price"
            )
        return agent, request.price

    def price_order(self, request: OrderRequest) -> Tuple[Agent, Execution]:
        agent, price = self.resolve_price(request)
        notional = request.amount * price
        execution = Execution(
            side=request.side,
            amount=request.amount,
            price=price,
            notional=notional,
            fee=calculate_fee(notional, self.config.fee_rate),
        )
        return agent, execution

    # Balance/Holdings validator

    def _locked_balance(self, user_id: str) -> Optional[Balance]:
        return (
            self.db.query(Balance)
            .filter(Balance.user_id == user_id, Balance.currency == self.config.currency)
            .with_for_update()
            .one_or_none()
        )

    def _locked_holding(self, user_id: str, agent_id: str) -> Optional[Holding]:
        return (
            self.db.query(Holding)
            .filter(Holding.user_id == user_id, Holding.agent_id == agent_id)
            .with_for_update()
            .one_or_none()
        )

    def validate(
        self, user_id: str, agent_id: str, execution: Execution
    ) -> Tuple[Optional[Balance], Optional[Holding]]:
        """
        Checks that the user can pay for a buy or cover a sell.

        The returned rows stay locked until the surrounding transaction ends.

        Raises:
            InsufficientFundsError: Buy notional plus fee exceeds the balance.
            InsufficientHoldingsError: Sell amount exceeds the held quantity.
        """
        balance = self._locked_balance(user_id)
        holding = self._locked_holding(user_id, agent_id)

        if execution.side == "buy":
            required = execution.notional + execution.fee
            available = Decimal(balance.available) if balance is not None else Decimal(0)
            if available < required:
                logger.info(
                    f"Rejecting buy for user {user_id}: required {required}, available {available}"
                )
                raise InsufficientFundsError(
                    required=float(required), available=float(available), currency=self.config.currency
                )
        else:
            held = Decimal(holding.quantity) if holding is not None else Decimal(0)
            if held < execution.amount:
                logger.info(
                    f"Rejecting sell for user {user_id}: required {execution.amount}, held {held}"
                )
                raise InsufficientHoldingsError(required=float(execution.amount), available=float(held))
            if balance is None:
                raise ValidationError(
                    f"No {self.config.currency} balance to credit sale proceeds to",
                    currency=self.config.currency,
                )

        return balance, holding

    # Order recorder

    def record_order(self, user_id: str, request: OrderRequest, execution: Execution) -> Order:
        order = Order(
            user_id=user_id,
            agent_id=request.agent_id,
            type=request.type,
            side=request.side,
            amount=request.amount,
            price=request.price,
            status="pending",
            filled_amount=Decimal(0),
            fees=execution.fee,
            time_in_force=request.time_in_force,
        )
        transition_order(order, "filled")
        order.filled_amount = request.amount
        order.average_fill_price = execution.price
        self.db.add(order)
        self.db.flush()
        return order

    # Settlement engine

    def settle(
        self,
        user_id: str,
        agent_id: str,
        execution: Execution,
        balance: Optional[Balance],
        holding: Optional[Holding],
    ) -> Optional[Holding]:
        """
        Applies a filled order to the user's balance and holding.

        Returns:
            Optional[Holding]: The updated holding, or None when a sell
            liquidated the whole position.
        """
        if execution.side == "buy":
            # the validator guarantees a funded balance row for buys
            balance.available = Decimal(balance.available) - execution.net_amount

            if holding is None:
                holding = Holding(
                    user_id=user_id,
                    agent_id=agent_id,
                    quantity=execution.amount,
                    average_price=execution.price,
                    total_invested=execution.notional,
                    realized_pnl=Decimal(0),
                )
                self.db.add(holding)
            else:
                quantity = Decimal(holding.quantity) + execution.amount
                total_invested = Decimal(holding.total_invested) + execution.notional
                holding.quantity = quantity
                holding.total_invested = total_invested
                holding.average_price = total_invested / quantity
            self.db.flush()
            return holding

        balance.available = Decimal(balance.available) + execution.net_amount

        old_quantity = Decimal(holding.quantity)
        average_price = Decimal(holding.average_price)
        realized = (execution.price - average_price) * execution.amount
        new_quantity = old_quantity - execution.amount

        if new_quantity <= 0:
            logger.info(f"Holding {agent_id} of user {user_id} fully liquidated")
            self.db.delete(holding)
            self.db.flush()
            return None

        holding.quantity = new_quantity
        holding.total_invested = Decimal(holding.total_invested) * new_quantity / old_quantity
        holding.realized_pnl = Decimal(holding.realized_pnl) + realized
        self.db.flush()
        return holding

    # Transaction logger

    def log_transaction(self, order: Order, execution: Execution) -> Transaction:
        transaction = Transaction(
            user_id=order.user_id,
            agent_id=order.agent_id,
            order_id=order.id,
            type=execution.side,
            quantity=execution.amount,
            price=execution.price,
            total_amount=execution.notional,
            fees=execution.fee,
            status="completed",
            transaction_metadata={
                "order_type": order.type,
                "time_in_force": order.time_in_force,
            },
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def notify_fill(self, order: Order, transaction: Transaction, execution: Execution) -> Notification:
        notification = Notification(
            user_id=order.user_id,
            type="order_filled",
            category="trading",
            title="Order Filled",
            message=(
                f"Your {order.side} order for {execution.amount} units has been filled "
                f"at ${execution.price:.4f}"
            ),
            data={"order_id": order.id, "transaction_id": transaction.id},
        )
        self.db.add(notification)
        return notification

    # Pipeline

    def place_order(self, user_id: str, request: OrderRequest) -> Tuple[Order, Execution]:
        """
        Runs the full settlement pipeline for one order.

        Args:
            user_id (str): Authenticated caller.
            request (OrderRequest): Validated order request.

        Returns:
            Tuple[Order, Execution]: The filled order and its economic figures.
        """
        logger.info(
            f"Placing {request.type} {request.side} order for user {user_id}: "
            f"{request.amount} of agent {request.agent_id}"
        )
        try:
            agent, execution = self.price_order(request)
            balance, holding = self.validate(user_id, agent.id, execution)
            order = self.record_order(user_id, request, execution)
            self.settle(user_id, agent.id, execution, balance, holding)
            transaction = self.log_transaction(order, execution)
            self.notify_fill(order, transaction, execution)
            self.db.commit()
        except TradingError:
            self.db.rollback()
            raise
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"Concurrent ledger update for user {user_id}: {e}")
            raise ConcurrentModificationError("Ledger was modified concurrently, please retry")
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Ledger constraint violated for user {user_id}: {e}")
            raise ConcurrentModificationError("Ledger was modified concurrently, please retry")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while settling order for user {user_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to settle order")

        self.db.refresh(order)
        logger.info(
            f"Order {order.id} filled at {execution.price} (fee {execution.fee}, net {execution.net_amount})"
        )
        return order, execution

    def cancel_order(self, user_id: str, order_id: str) -> Order:
        order = (
            self.db.query(Order)
            .filter(Order.id == order_id, Order.user_id == user_id)
            .with_for_update()
            .one_or_none()
        )
        if order is None:
            raise NotFoundError("Order not found", order_id=order_id)

        try:
            transition_order(order, "cancelled")
            self.db.commit()
        except TradingError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while cancelling order {order_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to cancel order")

        self.db.refresh(order)
        logger.info(f"Order {order_id} cancelled")
        return order
