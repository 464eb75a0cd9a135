# fitai/errors.py


class FitAIError(Exception):
    """Error de dominio con código HTTP asociado."""

    status_code = 500

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        if status_code is not None:
            self.status_code = status_code


class ValidationError(FitAIError):
    status_code = 400


class NotFound(FitAIError):
    status_code = 404


class ExternalServiceError(FitAIError):
    """Fallo de una API externa (OpenAI, Nutritionix, USDA) sin fallback posible."""

    status_code = 502
