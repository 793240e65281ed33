"""Orders blueprint - read-only order history (tenant-scoped)."""

from flask import Blueprint, g, jsonify, request

from backoffice.database import get_session
from backoffice.middleware import require_login, require_tenant
from backoffice.services import order_service
from backoffice.services.pagination import page_args, page_payload


orders_bp = Blueprint('orders', __name__, url_prefix='/api/orders')


@orders_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_orders():
    """Paginated orders, newest first. Filters: status, date_from, date_to, q."""
    page, page_size = page_args(request.args)
    status = request.args.get('status', '').strip()
    orders, total = order_service.list_orders(
        get_session(),
        g.tenant_id,
        status=None if status == 'all' else status,
        date_from=order_service.parse_day(request.args.get('date_from', '').strip(), 'date_from'),
        date_to=order_service.parse_day(request.args.get('date_to', '').strip(), 'date_to'),
        search=request.args.get('q', '').strip(),
        page=page,
        page_size=page_size,
    )
    return jsonify(page_payload('orders', orders, total, page, page_size))


@orders_bp.route('/<int:order_id>', methods=['GET'])
@require_login
@require_tenant
def get_order(order_id: int):
    """Order detail with its lines."""
    order = order_service.get_order(get_session(), g.tenant_id, order_id)
    return jsonify(order.to_dict(include_lines=True))
