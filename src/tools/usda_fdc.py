# src/tools/usda_fdc.py
"""USDA FoodData Central search + food detail."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from utils.errors import BadRequest, NotFound, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_usda_api_key

logger = get_logger(__name__)

FDC_BASE = "https://api.nal.usda.gov/fdc/v1"


def _get(path: str, params: Dict[str, Any], *, session=None) -> Any:
    http = session or requests
    params = {**params, "api_key": get_usda_api_key()}
    try:
        resp = http.get(f"{FDC_BASE}{path}", params=params, timeout=20)
    except requests.RequestException as e:
        raise UpstreamError(f"FoodData Central request failed: {e}") from e
    if resp.status_code == 404:
        raise NotFound("Food not found")
    if not resp.ok:
        logger.warning("FDC %s %s: %s", path, resp.status_code, resp.text[:200])
        raise UpstreamError(f"FoodData Central error {resp.status_code}", status_code=502)
    return resp.json()


def _flatten_nutrient(n: Dict[str, Any]) -> Dict[str, Any]:
    # search results are flat; detail responses nest the nutrient object
    inner = n.get("nutrient") or {}
    return {
        "name": n.get("nutrientName") or inner.get("name"),
        "amount": n.get("value", n.get("amount")),
        "unit": (n.get("unitName") or inner.get("unitName") or "").lower() or None,
    }


def search_foods(query: Optional[str], page_size: int = 20, page: int = 1, *, session=None) -> Dict[str, Any]:
    if not query or not query.strip():
        raise BadRequest("Search query is required.")
    data = _get(
        "/foods/search",
        {"query": query.strip(), "pageSize": max(1, min(int(page_size), 200)), "pageNumber": max(1, int(page))},
        session=session,
    )
    foods: List[Dict[str, Any]] = []
    for f in data.get("foods") or []:
        foods.append(
            {
                "fdcId": f.get("fdcId"),
                "description": f.get("description"),
                "dataType": f.get("dataType"),
                "brandOwner": f.get("brandOwner"),
                "nutrients": [_flatten_nutrient(n) for n in f.get("foodNutrients") or []],
            }
        )
    return {"totalHits": data.get("totalHits", 0), "foods": foods}


def get_food(fdc_id: Any, *, session=None) -> Dict[str, Any]:
    try:
        fdc_id = int(fdc_id)
    except (TypeError, ValueError):
        raise BadRequest("fdcId must be a number.")
    data = _get(f"/food/{fdc_id}", {}, session=session)
    return {
        "fdcId": data.get("fdcId", fdc_id),
        "description": data.get("description"),
        "dataType": data.get("dataType"),
        "brandOwner": data.get("brandOwner"),
        "servingSize": data.get("servingSize"),
        "servingSizeUnit": data.get("servingSizeUnit"),
        "nutrients": [_flatten_nutrient(n) for n in data.get("foodNutrients") or []],
    }
