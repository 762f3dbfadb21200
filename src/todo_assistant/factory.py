"""Dependency injection factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from todo_assistant.config import Config
from todo_assistant.providers.manager import ProviderManager
from todo_assistant.store.task_store import InMemoryTaskStore, TaskStore

logger = logging.getLogger(__name__)

# Global instances for dependency injection (composition root)
_config: Config | None = None
_provider_manager: ProviderManager | None = None
_task_store: TaskStore | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_provider_manager() -> ProviderManager:
    """Get or create the ProviderManager singleton."""
    global _provider_manager
    if _provider_manager is None:
        _provider_manager = ProviderManager.from_config(get_config())
    return _provider_manager


def get_task_store() -> TaskStore:
    """Get or create the TaskStore singleton."""
    global _task_store
    if _task_store is None:
        _task_store = InMemoryTaskStore()
    return _task_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    manager = get_provider_manager()
    info = manager.get_provider_info()
    logger.info(f"[Lifespan] AI provider ready: {info.name} (available={info.available})")
    try:
        yield
    finally:
        logger.info("[Lifespan] Closing provider clients...")
        await manager.aclose()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from todo_assistant.api.ai import router as ai_router
    from todo_assistant.api.chat import router as chat_router
    from todo_assistant.api.summary import router as summary_router
    from todo_assistant.api.tasks import router as tasks_router

    app = FastAPI(
        title="TodoAssistant",
        description="Todo list with a natural-language assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(tasks_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")
    app.include_router(summary_router, prefix="/api")
    app.include_router(ai_router, prefix="/api")

    return app
