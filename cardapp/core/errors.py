# cardapp/core/errors.py
"""
Errores tipados de la app.

Los services los lanzan; los routers los traducen a HTTPException:

    ValidationError    -> 400
    NotFoundError      -> 404
    StorageError       -> 500
    ProfileSourceError -> 502
"""


class CardError(Exception):
    """Base de todos los errores de la app."""


class ValidationError(CardError):
    """Entrada inválida. No se tocó la DB."""


class NotFoundError(CardError):
    pass


class StorageError(CardError):
    """
    Falla de la DB (caída, timeout, conflicto de transacción).
    Nunca deja estado parcial: el caller puede reintentar la operación completa.
    """


class ProfileSourceError(CardError):
    """La fuente externa de perfiles (Twitter) falló o respondió raro."""
