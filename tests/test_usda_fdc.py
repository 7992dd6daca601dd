import pytest
from conftest import FakeResponse, FakeSession

from tools import usda_fdc
from utils.errors import BadRequest, NotFound, UpstreamError


def test_search_flattens_nutrients():
    session = FakeSession(
        FakeResponse(200, {
            "totalHits": 1,
            "foods": [{
                "fdcId": 171688, "description": "Apples, raw", "dataType": "SR Legacy",
                "foodNutrients": [{"nutrientName": "Energy", "value": 52, "unitName": "KCAL"}],
            }],
        })
    )
    out = usda_fdc.search_foods("apple", page_size=500, page=0, session=session)
    assert out["totalHits"] == 1
    assert out["foods"][0]["nutrients"] == [{"name": "Energy", "amount": 52, "unit": "kcal"}]
    params = session.calls[0][2]["params"]
    assert params["pageSize"] == 200
    assert params["pageNumber"] == 1
    assert params["api_key"] == "DEMO_KEY"


def test_detail_nested_nutrients():
    session = FakeSession(
        FakeResponse(200, {
            "fdcId": 171688, "description": "Apples, raw", "servingSize": 100, "servingSizeUnit": "g",
            "foodNutrients": [{"nutrient": {"name": "Protein", "unitName": "g"}, "amount": 0.26}],
        })
    )
    food = usda_fdc.get_food("171688", session=session)
    assert food["nutrients"] == [{"name": "Protein", "amount": 0.26, "unit": "g"}]
    assert session.calls[0][1].endswith("/food/171688")


def test_errors():
    with pytest.raises(BadRequest):
        usda_fdc.search_foods("")
    with pytest.raises(BadRequest):
        usda_fdc.get_food("apple")
    with pytest.raises(NotFound):
        usda_fdc.get_food(1, session=FakeSession(FakeResponse(404)))
    with pytest.raises(UpstreamError):
        usda_fdc.search_foods("x", session=FakeSession(FakeResponse(500, text="boom")))
