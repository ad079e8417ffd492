from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    pages = (total + limit - 1) // limit if limit else 0
    return Pagination(page=page, limit=limit, total=total, pages=pages)


def normalize_paging(page: int, limit: int, default_limit: int = 50, max_limit: int = 100):
    """Out-of-range values fall back to the defaults instead of failing the request"""
    if page < 1:
        page = 1
    if limit < 1 or limit > max_limit:
        limit = default_limit
    return page, limit
