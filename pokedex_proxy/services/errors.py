class ServiceError(Exception):
    """Fallo al hablar con la PokeAPI (estado no 2xx, timeout, red...)"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """La PokeAPI dice que el recurso no existe (404)"""


class UpstreamTimeoutError(ServiceError):
    pass


class UpstreamConnectionError(ServiceError):
    pass


class InvalidQueryError(ValueError):
    """Parametros de listado invalidos (page/limit < 1)"""
