"""Error types shared by the API handlers and the storage layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class FoodManagerError(Exception):
    """Base error rendered as a JSON body by the API exception handler."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, error: Optional[str] = None) -> None:
        if error is not None:
            self.error = error
        super().__init__(self.error)

    def to_payload(self, *, include_detail: bool = False) -> Dict[str, Any]:
        return {"error": self.error}


class ValidationError(FoodManagerError):
    status_code = 400
    error = "Invalid payload"


class InvalidPayloadError(ValidationError):
    error = "Request body must be a JSON object"


class MissingFieldsError(ValidationError):
    error = "Missing required fields"

    def __init__(self, required: List[str], missing: List[str]) -> None:
        super().__init__()
        self.required = list(required)
        self.missing = list(missing)

    def to_payload(self, *, include_detail: bool = False) -> Dict[str, Any]:
        return {
            "error": self.error,
            "required": self.required,
            "missing": self.missing,
            "received": {field: field not in self.missing for field in self.required},
        }


class InvalidFoodTypeError(ValidationError):
    error = "Invalid food type"

    def __init__(self, valid_types: List[str], received: Any) -> None:
        super().__init__()
        self.valid_types = list(valid_types)
        self.received = received

    def to_payload(self, *, include_detail: bool = False) -> Dict[str, Any]:
        return {"error": self.error, "validTypes": self.valid_types, "received": self.received}


class InvalidImageUrlError(ValidationError):
    error = "Invalid image URL"

    def __init__(self, received: Any) -> None:
        super().__init__()
        self.received = received

    def to_payload(self, *, include_detail: bool = False) -> Dict[str, Any]:
        return {"error": self.error, "received": self.received}


class NotFoundError(FoodManagerError):
    status_code = 404
    error = "Food not found"


class PersistenceError(FoodManagerError):
    """Underlying store failure; ``detail`` is only exposed outside production."""

    status_code = 500
    error = "Database error"

    def __init__(self, error: Optional[str] = None, detail: Optional[str] = None) -> None:
        super().__init__(error)
        self.detail = detail

    def to_payload(self, *, include_detail: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if include_detail and self.detail:
            payload["message"] = self.detail
        return payload


class AuthError(FoodManagerError):
    status_code = 401
    error = "Invalid email or password"
