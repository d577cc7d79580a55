"""
Service Container
=================

Purpose
-------
Build every domain service once with its dependencies and hand them out
to the surrounding application (HTTP handlers, jobs, admin tooling).

Responsibilities
----------------
- Initialize all domain services with ConfigManager, EventBus and a logger
- Wire service-to-service dependencies (quests need progression,
  inventory and cosmetics; redemption needs the ledger)
- Expose services as properties that fail loudly before initialization
- Record per-service init timing for a health snapshot
- Log the non-sensitive configuration summary at startup

Non-Responsibilities
--------------------
- Database lifecycle (DatabaseService.initialize/shutdown)
- Business logic
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Optional

from alchemy.core.config.config import Config
from alchemy.core.logging.logger import get_logger
from alchemy.modules.cosmetics import CosmeticsService
from alchemy.modules.inventory import InventoryService
from alchemy.modules.progression import ProgressionService
from alchemy.modules.quests import QuestService
from alchemy.modules.rewards import RedemptionService, RewardsLedgerService

if TYPE_CHECKING:
    from logging import Logger

    from alchemy.core.config.manager import ConfigManager
    from alchemy.core.event.bus import EventBus


class ServiceContainer:
    """
    Dependency container for all domain services.

    Usage:
        container = ServiceContainer(ConfigManager, event_bus, logger)
        await container.initialize()
        await container.quests.claim_quest(user_id, quest_id)
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config_manager = config_manager
        self._event_bus = event_bus
        self._logger = logger

        self._progression: Optional[ProgressionService] = None
        self._inventory: Optional[InventoryService] = None
        self._cosmetics: Optional[CosmeticsService] = None
        self._quests: Optional[QuestService] = None
        self._rewards_ledger: Optional[RewardsLedgerService] = None
        self._redemption: Optional[RedemptionService] = None

        self._initialized = False
        self._service_init_times: Dict[str, float] = {}
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        self._logger.info(
            "Service container initialization starting...",
            extra={"config": Config.get_config_summary()},
        )

        self._progression = self._create_service("progression", ProgressionService)
        self._inventory = self._create_service("inventory", InventoryService)
        self._cosmetics = self._create_service("cosmetics", CosmeticsService)

        self._quests = self._create_service(
            "quests",
            QuestService,
            progression_service=self._progression,
            inventory_service=self._inventory,
            cosmetics_service=self._cosmetics,
        )

        self._rewards_ledger = self._create_service("rewards_ledger", RewardsLedgerService)
        self._redemption = self._create_service(
            "redemption",
            RedemptionService,
            ledger_service=self._rewards_ledger,
        )

        self._init_end = time.perf_counter()
        self._initialized = True
        self._logger.info(
            "Service container initialized",
            extra={
                "service_count": len(self._service_init_times),
                "duration_ms": round((self._init_end - self._init_start) * 1000, 2),
            },
        )

    def _create_service(self, name: str, cls: type, **dependencies: Any) -> Any:
        """
        Construct one service with the shared dependencies and timing.

        Raises:
            Exception: Whatever the service constructor raised
        """
        start = time.perf_counter()

        try:
            instance = cls(
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                logger=get_logger(f"{cls.__module__}.{cls.__name__}"),
                **dependencies,
            )
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")
        return instance

    async def shutdown(self) -> None:
        if not self._initialized:
            return
        self._logger.info("Shutting down service container...")
        self._initialized = False

    async def health_check(self) -> Dict[str, bool | float | int | None]:
        return {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start is not None and self._init_end is not None
                else None
            ),
        }

    def _require(self, service: Optional[Any]) -> Any:
        if not self._initialized or service is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return service

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def progression(self) -> ProgressionService:
        return self._require(self._progression)

    @property
    def inventory(self) -> InventoryService:
        return self._require(self._inventory)

    @property
    def cosmetics(self) -> CosmeticsService:
        return self._require(self._cosmetics)

    @property
    def quests(self) -> QuestService:
        return self._require(self._quests)

    @property
    def rewards_ledger(self) -> RewardsLedgerService:
        return self._require(self._rewards_ledger)

    @property
    def redemption(self) -> RedemptionService:
        return self._require(self._redemption)
