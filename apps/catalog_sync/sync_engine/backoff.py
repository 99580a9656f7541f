"""
Política de reintentos y cancelación compartida por el cliente REST y el
orquestador.

Reemplaza los `sleep` manuales: una sola abstracción con máximo de intentos,
delay exponencial, jitter, respeto de `Retry-After` y cancelación explícita.
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Type, TypeVar

from .exceptions import RateLimitError, TransportError, SyncCancelled

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CancellationToken:
    """
    Token de cancelación cooperativa

    El orquestador lo consulta entre páginas y lo usa para todas sus esperas,
    de modo que `cancel()` interrumpe también un backoff en curso.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Espera `seconds` segundos; retorna True si se canceló durante la espera"""
        if seconds <= 0:
            return self._event.is_set()
        return self._event.wait(seconds)

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise SyncCancelled("Sincronización cancelada")


@dataclass
class RetryPolicy:
    """Configuración de reintentos con backoff exponencial"""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 120.0
    multiplier: float = 2.0
    jitter: float = 0.1  # fracción del delay agregada al azar
    retry_on: Tuple[Type[BaseException], ...] = field(
        default=(RateLimitError, TransportError)
    )

    @classmethod
    def from_settings(cls, sync_settings: dict) -> 'RetryPolicy':
        return cls(
            max_attempts=int(sync_settings.get('MAX_ATTEMPTS', 3)),
            base_delay=float(sync_settings.get('BACKOFF_BASE_SECONDS', 1.0)),
            max_delay=float(sync_settings.get('BACKOFF_MAX_SECONDS', 120.0)),
        )

    def compute_delay(self, attempt: int, error: Optional[BaseException] = None) -> Optional[float]:
        """
        Delay antes del intento `attempt + 1`

        Un `RateLimitError` impone su `retry_after`. Si la tienda pide esperar
        más que `max_delay` se retorna None: no se reintenta y el llamador decide.
        """
        if isinstance(error, RateLimitError):
            retry_after = float(error.retry_after)
            if retry_after > self.max_delay:
                return None
            return retry_after

        delay = min(self.base_delay * (self.multiplier ** (attempt - 1)), self.max_delay)
        if self.jitter and delay > 0:
            delay += random.uniform(0, delay * self.jitter)
        return min(delay, self.max_delay)

    def run(self, operation: Callable[[], T],
            cancel_token: Optional[CancellationToken] = None,
            description: str = "operación") -> T:
        """
        Ejecuta `operation` reintentando los errores de `retry_on`

        Las excepciones que no están en `retry_on` (p. ej. AuthError) se
        propagan sin reintentar. Agotados los intentos se relanza el último error.
        """
        token = cancel_token or CancellationToken()
        attempt = 1

        while True:
            token.raise_if_cancelled()
            try:
                return operation()
            except self.retry_on as exc:
                if attempt >= self.max_attempts:
                    logger.error(f"❌ {description}: {attempt} intento(s) agotados - {exc}")
                    raise

                delay = self.compute_delay(attempt, exc)
                if delay is None:
                    logger.warning(f"⚠️ {description}: Retry-After excede el máximo permitido, no se reintenta")
                    raise

                logger.warning(
                    f"⚠️ {description} falló (intento {attempt}/{self.max_attempts}): {exc}. "
                    f"Reintentando en {delay:.1f}s"
                )
                if token.wait(delay):
                    raise SyncCancelled(f"{description} cancelada durante el backoff") from exc
                attempt += 1
