from typing import Any, Dict

from .models import CompanyResult, ProfileResult


def build_response(result: ProfileResult | CompanyResult) -> Dict[str, Any]:
    """Serialize a lookup result to the JSON shape callers get back.

    A profile without a resolved company is returned alone: the `company`
    key is left out rather than sent as null.
    """
    if isinstance(result, ProfileResult) and result.company is None:
        return result.model_dump(exclude={"company"})
    return result.model_dump()


def build_error(message: str) -> Dict[str, Any]:
    return {"error": message}
