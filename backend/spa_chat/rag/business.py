"""Business configuration loader with an explicit refresh path."""

from __future__ import annotations

from spa_chat.core.errors import UpstreamFailure
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import UPSTREAM_FAILURES
from spa_chat.db.catalog import CatalogRepository
from spa_chat.models.entities import BusinessConfig
from spa_chat.utils.time import now_ms

logger = get_logger(__name__)


class BusinessConfigLoader:
    """Caches the business singleton until :meth:`refresh` is called.

    A failed or empty fetch is not cached, so the next :meth:`get` retries.
    """

    def __init__(self, catalog: CatalogRepository) -> None:
        self.catalog = catalog
        self._config: BusinessConfig | None = None
        self.loaded_at: int | None = None

    def get(self) -> BusinessConfig | None:
        if self._config is None:
            self._load()
        return self._config

    def refresh(self) -> BusinessConfig | None:
        self._config = None
        self.loaded_at = None
        return self.get()

    def _load(self) -> None:
        try:
            config = self.catalog.get_business_config()
        except Exception as exc:  # noqa: BLE001 - fallback context is optional
            failure = UpstreamFailure("load_business_config", exc)
            logger.warning("%s", failure, extra={"ctx_operation": failure.operation})
            UPSTREAM_FAILURES.labels(operation=failure.operation).inc()
            return
        if config is not None:
            self._config = config
            self.loaded_at = now_ms()


__all__ = ["BusinessConfigLoader"]
