import pytest

from sitepay.common.pagination import Page, Pagination
from sitepay.core.exceptions import ValidationError


def test_from_query_defaults_and_clamps_limit():
    assert Pagination.from_query(None, None) == Pagination(page=1, limit=10)
    assert Pagination.from_query("2", "500", max_limit=100) == Pagination(page=2, limit=100)
    assert Pagination.from_query("3", "", default_limit=25).limit == 25


@pytest.mark.parametrize("page,limit", [("0", "10"), ("1", "0"), ("x", "10"), ("1", "-5")])
def test_from_query_rejects_bad_values(page, limit):
    with pytest.raises(ValidationError):
        Pagination.from_query(page, limit)


def test_page_meta_for_middle_page():
    page = Page(items=[1, 2], pagination=Pagination(page=2, limit=2), total_count=5)

    assert page.pagination.offset == 2
    assert page.meta() == {"currentPage": 2, "totalPages": 3, "totalCount": 5, "hasNext": True, "hasPrev": True}


def test_page_meta_when_empty():
    page = Page(items=[], pagination=Pagination(), total_count=0)

    assert page.meta() == {"currentPage": 1, "totalPages": 0, "totalCount": 0, "hasNext": False, "hasPrev": False}
