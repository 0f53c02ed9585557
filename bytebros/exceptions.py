"""Domain errors.

Every error carries the HTTP status it maps to and a short user-facing
message. Internal details (driver errors, tracebacks) go to the log, never
into ``message``.
"""
from typing import Dict, Optional


class ShopError(Exception):
    """Base exception for the shop backend."""

    status_code: int = 500
    default_message: str = "Erro interno do servidor."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(ShopError):
    """Required input missing or malformed; raised before any store call."""

    status_code = 400
    default_message = "Dados inválidos."


class AuthenticationError(ShopError):
    """Bad credentials. The message never says which part was wrong."""

    status_code = 401
    default_message = "Credenciais inválidas."


class Unauthenticated(ShopError):
    """No bearer token on a protected route."""

    status_code = 401
    default_message = "Token de acesso ausente."

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(ShopError):
    """Token present but invalid/expired, or caller lacks the privilege."""

    status_code = 403
    default_message = "Token inválido ou expirado."


class ConflictError(ShopError):
    """Unique constraint violation (e.g. e-mail already registered)."""

    status_code = 409
    default_message = "Registro já existente."


class OrderCreationFailed(ShopError):
    """Anything went wrong inside the order transaction; it was rolled back."""

    status_code = 500
    default_message = "Erro ao criar pedido."


class StoreError(ShopError):
    """Generic storage failure."""

    status_code = 500
    default_message = "Erro ao acessar o banco de dados."
