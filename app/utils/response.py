from typing import Any


def success_response(data: Any = None, message: str | None = None) -> dict:
    return {"status": "success", "data": data, "message": message}


def error_response(message: str, data: Any = None) -> dict:
    return {"status": "error", "data": data, "message": message}


def operation_summary(success: int, failed: int, errors: list[str]) -> dict:
    """Outcome of an operation applied to many rows independently."""
    return {"success": success, "failed": failed, "errors": errors}
