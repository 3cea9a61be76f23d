from typing import Dict, List, Tuple

from flask import request, abort

MAX_LIMIT = 100


def parse_pagination(default_limit: int = 10) -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(default_limit)))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort(columns: Dict, default: str) -> List:
    """
    Comma-separated fields; prefix with '-' for desc.
    `columns` is the allowlist: API field -> SQLAlchemy column.
    """
    sort_param = request.args.get("sort", default)
    fields = [s.strip() for s in sort_param.split(",") if s.strip()]
    order_by = []
    for f in fields:
        desc = f.startswith("-")
        key = f[1:] if desc else f
        col = columns.get(key)
        if col is None:
            abort(400, description=f"Unsupported sort field: {key}. Allowed: {', '.join(columns)}")
        order_by.append(col.desc() if desc else col.asc())
    return order_by


def paginate(query, page: int, limit: int):
    """Return (rows, meta) for an already filtered/ordered query."""
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, {"page": page, "limit": limit, "total": total}
