# sitegen/dependencies.py
# Process-wide services: built once at startup, injected into handlers

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from sitegen.clients.bedrock_client import BedrockClient
from sitegen.clients.s3_storage import AssetStore, HostingTarget, build_s3_client
from sitegen.config import Settings
from sitegen.repositories.generation_repository import GenerationRepository
from sitegen.repositories.user_repository import UserRepository
from sitegen.services.auth_service import AuthService
from sitegen.services.history_service import HistoryService
from sitegen.services.publish_service import PublishCoordinator
from sitegen.services.site_service import SiteService


@dataclass
class ServiceContainer:
    auth: AuthService
    sites: SiteService
    history: HistoryService
    publisher: PublishCoordinator
    assets: AssetStore


def build_container(settings: Settings) -> ServiceContainer:
    """Wire repositories and AWS clients into services."""
    users = UserRepository()
    generations = GenerationRepository()
    s3 = build_s3_client(settings)

    return ServiceContainer(
        auth=AuthService(users),
        sites=SiteService(BedrockClient.from_settings(settings), generations),
        history=HistoryService(generations),
        publisher=PublishCoordinator(users, HostingTarget.from_settings(s3, settings)),
        assets=AssetStore.from_settings(s3, settings),
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_auth_service(container: ServiceContainer = Depends(get_container)) -> AuthService:
    return container.auth


def get_site_service(container: ServiceContainer = Depends(get_container)) -> SiteService:
    return container.sites


def get_history_service(container: ServiceContainer = Depends(get_container)) -> HistoryService:
    return container.history


def get_publisher(container: ServiceContainer = Depends(get_container)) -> PublishCoordinator:
    return container.publisher


def get_asset_store(container: ServiceContainer = Depends(get_container)) -> AssetStore:
    return container.assets
