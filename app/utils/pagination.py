MAX_PER_PAGE = 100


def paginate(query, page=1, per_page=10, serializer=None):
    """Paginate a query and return a JSON-ready dict.

    ``serializer`` turns each row into a dict; it defaults to ``to_dict()``.
    """
    page = max(int(page or 1), 1)
    per_page = min(max(int(per_page or 10), 1), MAX_PER_PAGE)
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    serialize = serializer or (lambda row: row.to_dict())
    return {
        "items": [serialize(row) for row in pagination.items],
        "page": pagination.page,
        "per_page": pagination.per_page,
        "total": pagination.total,
        "pages": pagination.pages,
    }
