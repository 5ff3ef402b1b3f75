import pytest

from eventhub.common import ApiError
from eventhub.interests import InterestCatalog
from eventhub.models import Interest
from eventhub.store import Store


@pytest.fixture
def catalog():
    store = Store()
    store.add(Interest(name="Chess", category="Games", description="Board strategy"))
    store.add(Interest(name="Running", category="Sport", description="Outdoor"))
    store.add(Interest(name="Go", category="Games", description="Stones on a board"))
    return InterestCatalog(store)


def test_list_sorted_by_name(catalog):
    result = catalog.list_interests()
    assert [i["name"] for i in result["data"]] == ["Chess", "Go", "Running"]
    assert result["pagination"]["total"] == 3


def test_list_filters_by_category(catalog):
    result = catalog.list_interests(category="Sport")
    assert [i["name"] for i in result["data"]] == ["Running"]


def test_search_is_case_insensitive_over_description(catalog):
    result = catalog.list_interests(search="BOARD")
    assert {i["name"] for i in result["data"]} == {"Chess", "Go"}


def test_search_too_long_rejected(catalog):
    with pytest.raises(ApiError) as info:
        catalog.list_interests(search="x" * 101)
    assert info.value.status == 400
    assert info.value.message == "Поисковый запрос должен быть от 1 до 100 символов"


def test_category_too_long_rejected(catalog):
    with pytest.raises(ApiError) as info:
        catalog.list_interests(category="c" * 51)
    assert info.value.message == "Категория должна быть от 1 до 50 символов"


def test_pagination_window(catalog):
    first = catalog.list_interests(page="1", limit="2")
    second = catalog.list_interests(page="2", limit="2")
    names = [i["name"] for i in first["data"] + second["data"]]
    assert names == ["Chess", "Go", "Running"]


def test_categories_are_distinct(catalog):
    categories = catalog.interest_categories()
    assert sorted(categories) == ["Games", "Sport"]


def test_create_strips_and_lists(catalog):
    created = catalog.create_interest(
        {"name": "  Hiking ", "category": " Sport ", "description": "Trails"}
    )
    assert created["name"] == "Hiking"
    assert created["category"] == "Sport"
    names = [i["name"] for i in catalog.list_interests(category="Sport")["data"]]
    assert "Hiking" in names


def test_create_duplicate_conflicts(catalog):
    with pytest.raises(ApiError) as info:
        catalog.create_interest({"name": " Chess ", "category": "Games"})
    assert info.value.status == 409


def test_create_requires_category(catalog):
    with pytest.raises(ApiError) as info:
        catalog.create_interest({"name": "Poetry"})
    assert info.value.message == "Неверные данные"


def test_create_name_whitespace_only(catalog):
    with pytest.raises(ApiError) as info:
        catalog.create_interest({"name": "   ", "category": "Art"})
    assert info.value.message == "Название должно быть от 1 до 100 символов"