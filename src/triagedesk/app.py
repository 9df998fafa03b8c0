"""Summary: Application factory wiring core services.

Importance: Centralizes dependency creation for the CLI and API layers.
Alternatives: Instantiate services manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass

from triagedesk.ai import ClassifierFactory
from triagedesk.classifier import ClassificationProvider, RuleBasedClassifier
from triagedesk.config import AppConfig
from triagedesk.services import (
    BulkTriageService,
    ClassificationCache,
    ClassificationGateway,
    DashboardService,
    HistoryService,
    SettingsService,
    TriageService,
)
from triagedesk.storage.repositories import HistoryRepository, SettingsRepository
from triagedesk.storage.sqlite_store import SqliteKeyValueStore


@dataclass(frozen=True)
class AppContext:
    """Summary: Shared storage and classifier for building services.

    Importance: One cache and one store are reused by every request.
    Alternatives: Rebuild dependencies for every request.
    """

    store: SqliteKeyValueStore
    gateway: ClassificationGateway
    config: AppConfig

    def services(self) -> "AppServices":
        """Summary: Build the service bundle from shared context.

        Importance: Keeps wiring identical between the CLI and API.
        Alternatives: Use a dependency injection container.
        """

        history = HistoryRepository(self.store)
        settings = SettingsRepository(self.store)
        triage = TriageService(history=history, settings=settings, gateway=self.gateway)
        return AppServices(
            triage=triage,
            bulk=BulkTriageService(triage=triage, limit=self.config.bulk_limit),
            history=HistoryService(history=history),
            settings=SettingsService(settings=settings),
            dashboard=DashboardService(history=history),
            gateway=self.gateway,
        )


@dataclass(frozen=True)
class AppServices:
    """Summary: Bundle of core services for triagedesk.

    Importance: Simplifies passing dependencies to UI or API layers.
    Alternatives: Use a dependency injection container.
    """

    triage: TriageService
    bulk: BulkTriageService
    history: HistoryService
    settings: SettingsService
    dashboard: DashboardService
    gateway: ClassificationGateway


def build_context(
    config: AppConfig, primary: ClassificationProvider | None = None
) -> AppContext:
    """Summary: Build shared storage and classification context.

    Importance: ``primary`` overrides the configured classifier, mainly for tests.
    Alternatives: Construct dependencies separately per request.
    """

    store = SqliteKeyValueStore(config.db_path)
    store.initialize()
    gateway = ClassificationGateway(
        primary=primary or ClassifierFactory(config).build(),
        fallback=RuleBasedClassifier(),
        cache=ClassificationCache(config.cache_ttl_seconds),
        retries=config.classifier_retries,
        backoff_ms=config.retry_backoff_ms,
    )
    return AppContext(store=store, gateway=gateway, config=config)


def build_services(config: AppConfig) -> AppServices:
    """Summary: Build core services from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Instantiate services directly within the CLI entrypoint.
    """

    return build_context(config).services()
