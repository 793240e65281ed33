"""Page-number pagination for tenant list endpoints."""

from typing import Any, Dict, List, Mapping, Tuple

from backoffice.exceptions import BusinessLogicError

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


def page_args(args: Mapping[str, Any]) -> Tuple[int, int]:
    """Read ?page= (1-based) and ?page_size= from query args."""
    try:
        page = int(args.get('page') or 1)
        page_size = int(args.get('page_size') or DEFAULT_PAGE_SIZE)
    except (TypeError, ValueError):
        raise BusinessLogicError('page and page_size must be integers')
    if page < 1 or page_size < 1:
        raise BusinessLogicError('page and page_size must be positive')
    return page, min(page_size, MAX_PAGE_SIZE)


def paginate(query, page: int, page_size: int) -> Tuple[List[Any], int]:
    """Rows of one page and the total row count of the unpaged query."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def page_payload(key: str, items: List[Any], total: int, page: int, page_size: int) -> Dict[str, Any]:
    return {
        key: [item.to_dict() for item in items],
        'total': total,
        'page': page,
        'page_size': page_size,
    }
