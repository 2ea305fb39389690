"""Uniform error envelope for API responses."""
from typing import Any, Dict, List, Optional


def create_error_response(
    detail: Any,
    status_code: int,
    code: str,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build the JSON body returned for failed requests.

    Args:
        detail: Human-readable description
        status_code: HTTP status code
        code: Machine-readable error code (e.g. HTTP_404, VALIDATION_ERROR)
        errors: Field-level validation errors (optional)

    Returns:
        Dict of the form {"error": {...}}
    """
    body: Dict[str, Any] = {
        "detail": detail,
        "status_code": status_code,
        "code": code,
    }
    if errors:
        body["errors"] = errors
    return {"error": body}
