"""Domain errors rendered as JSON by the application exception handler"""

from typing import Optional


class ServiceError(Exception):
    """Base class for business rule failures"""
    status_code = 400

    def __init__(self, message: str, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.detail:
            body["message"] = self.detail
        return body


class ValidationError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class InvalidTransitionError(ServiceError):
    """Raised when an order status change is not allowed for its source"""
    status_code = 400

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            "Transition invalide",
            detail=f'Impossible de passer de "{current_status}" à "{new_status}"',
        )
        self.current_status = current_status
        self.new_status = new_status


class QuotaExceededError(ServiceError):
    status_code = 403


class FeatureNotAvailableError(ServiceError):
    status_code = 403

    def __init__(self, feature: str):
        super().__init__(
            "Fonctionnalité non disponible dans votre offre",
            detail=feature,
        )
        self.feature = feature
