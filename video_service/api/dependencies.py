"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from video_service.application.services import (
    VideoCatalogService,
    VideoIngestionService,
)
from video_service.commons.settings.loader import get_settings as _load_settings
from video_service.commons.settings.models import Settings
from video_service.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def get_ingestion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoIngestionService:
    """Get the upload pipeline with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured video ingestion service.
    """
    return VideoIngestionService(
        blob_storage=factory.get_blob_storage(),
        repository=factory.get_video_repository(),
        transcoder=factory.get_transcoder(),
        staging=factory.get_staging_area(),
        settings=settings,
    )


def get_catalog_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoCatalogService:
    """Get the video record service.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured video catalog service.
    """
    return VideoCatalogService(
        repository=factory.get_video_repository(),
        blob_storage=factory.get_blob_storage(),
        settings=settings,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]
CatalogServiceDep = Annotated[VideoCatalogService, Depends(get_catalog_service)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize providers to fail fast on bad configuration
    factory.get_blob_storage()
    factory.get_video_repository()
    factory.get_transcoder()
    factory.get_staging_area()


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
