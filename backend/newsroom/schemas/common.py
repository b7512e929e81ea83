"""
Response envelope shared by every endpoint.

Every response body, success or failure, has the shape
``{success, message?, data?, errors?}``.
"""

from typing import Any, Dict, List, Optional


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build a success envelope, omitting empty keys."""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_response(
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    data: Any = None,
) -> Dict[str, Any]:
    """Build a failure envelope, omitting empty keys."""
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return body
