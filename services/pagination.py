from math import ceil

DEFAULT_PAGE_SIZE = 10
REPORT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def page_count(total: int, page_size: int) -> int:
     return ceil(total / page_size) if page_size else 0


def page_info(total: int, page: int, page_size: int) -> dict:
     return {
          "total": total,
          "page": page,
          "page_size": page_size,
          "pages": page_count(total, page_size),
     }
