import math

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Largest page whose offset still fits a signed 64-bit integer
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE + 1


def page_offset(page: int, page_size: int) -> int:
    """Number of rows to skip for a 1-indexed page."""
    return (page - 1) * page_size


def total_pages(total: int, page_size: int) -> int:
    """
    Number of pages needed to show ``total`` rows.

    A page size of 0 yields 0 pages.
    """
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)
