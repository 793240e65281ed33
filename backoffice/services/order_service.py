"""Order history reads (tenant-scoped). Orders are written by the point of sale."""

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import or_

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import Order, OrderStatus
from backoffice.services.pagination import DEFAULT_PAGE_SIZE, paginate

ORDER_STATUSES = {s.value for s in OrderStatus}


def parse_day(value: Optional[str], field: str) -> Optional[date]:
    """YYYY-MM-DD query value, None when empty."""
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise BusinessLogicError(f'{field} must be a date (YYYY-MM-DD)')


def list_orders(session, tenant_id: int, status: Optional[str] = None,
                date_from: Optional[date] = None, date_to: Optional[date] = None,
                search: str = '', page: int = 1,
                page_size: int = DEFAULT_PAGE_SIZE) -> Tuple[List[Order], int]:
    """
    One page of a tenant's orders, newest first, with the total count.

    date_from and date_to are whole days, both included. search matches
    the order number or the waiter name.
    """
    query = session.query(Order).filter(Order.tenant_id == tenant_id)

    if status:
        if status not in ORDER_STATUSES:
            raise BusinessLogicError(f'Invalid order status "{status}"')
        query = query.filter(Order.status == status)
    if date_from:
        query = query.filter(Order.created_at >= datetime.combine(date_from, datetime.min.time()))
    if date_to:
        query = query.filter(Order.created_at < datetime.combine(date_to + timedelta(days=1), datetime.min.time()))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Order.order_number.ilike(pattern),
            Order.waiter_name.ilike(pattern)
        ))

    return paginate(query.order_by(Order.created_at.desc(), Order.id.desc()), page, page_size)


def get_order(session, tenant_id: int, order_id: int) -> Order:
    """Order with its lines."""
    order = session.query(Order).filter(
        Order.id == order_id,
        Order.tenant_id == tenant_id
    ).first()
    if not order:
        raise NotFoundError(f'Order {order_id} not found')
    return order
