from typing import Any, Dict, Iterable, Mapping


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """First message per field from pydantic/FastAPI error dicts."""
    result: Dict[str, str] = {}
    for err in errors:
        loc = [part for part in err.get("loc", ()) if isinstance(part, str) and part != "body"]
        field = loc[-1] if loc else "__all__"
        message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        result.setdefault(field, message)
    return result
