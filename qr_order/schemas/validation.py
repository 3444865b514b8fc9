"""
Structured validation error details
"""
from typing import Dict, List, Sequence

REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def flatten_validation_errors(errors: Sequence[dict]) -> Dict[str, object]:
    """
    Group pydantic error entries by top-level field

    Errors without a field (e.g. a body that is not an object) land in
    ``form_errors``.

    Example:
        {"form_errors": [], "field_errors": {"items": ["items.0.qty: Input should be greater than 0"]}}
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        message = error.get("msg", "Invalid value")
        if not loc:
            form_errors.append(message)
            continue
        field = str(loc[0])
        if len(loc) > 1:
            path = ".".join(str(part) for part in loc)
            message = f"{path}: {message}"
        field_errors.setdefault(field, []).append(message)
    return {"form_errors": form_errors, "field_errors": field_errors}
