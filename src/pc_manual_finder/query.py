from __future__ import annotations

from pc_manual_finder.models import SearchRequest

QUERY_SUFFIX = "installation guide manual"


class InvalidSearchRequest(ValueError):
    pass


def _clean(value: str | None) -> str:
    return (value or "").strip()


def build_search_query(component_type: str | None, brand: str | None, model: str | None = None) -> str:
    component_type = _clean(component_type)
    brand = _clean(brand)
    model = _clean(model)
    if not component_type or not brand:
        raise InvalidSearchRequest("Component type and brand are required")

    if model:
        return f"{brand} {model} {component_type} {QUERY_SUFFIX}"
    return f"{brand} {component_type} {QUERY_SUFFIX}"


def query_for_request(request: SearchRequest) -> str:
    return build_search_query(request.component_type, request.brand, request.model)
