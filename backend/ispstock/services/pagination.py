# Overview: Page/limit handling shared by the list endpoints.

from __future__ import annotations

import math


def paginate(query, page: int, limit: int) -> tuple[list, dict]:
    """
    Apply LIMIT/OFFSET to query and build the pagination block.

    Returns (rows, {"page", "limit", "total", "pages"}).
    """
    total = query.order_by(None).count()
    rows = query.limit(limit).offset((page - 1) * limit).all()
    return rows, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
