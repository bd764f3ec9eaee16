"""分页参数与分页元信息工具。"""

from dataclasses import dataclass
import math

from fastapi import Query

from wcp_api.core.config import get_settings


@dataclass(frozen=True)
class PageParams:
    """已校验的分页参数。"""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict[str, int]:
        """构造 `{page, limit, total, pages}` 分页块。"""
        return build_pagination(page=self.page, limit=self.limit, total=total)


def build_pagination(*, page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def get_page_params(
    page: int = Query(default=1, ge=1, description="页码（从 1 开始）。"),
    limit: int | None = Query(default=None, ge=1, description="每页条数。"),
) -> PageParams:
    """路由依赖：解析分页参数，超出上限时截断。"""
    settings = get_settings()
    resolved = limit or settings.pagination_default_limit
    return PageParams(page=page, limit=min(resolved, settings.pagination_max_limit))
