"""Dependency Injection Container."""
from typing import Optional

from sbomview.core.config import ViewerConfig
from sbomview.core.config import get_config
from sbomview.services.loader_service import LoaderService
from sbomview.services.view_service import ViewService


class Container:
    """Simple DI Container to manage service lifecycles."""

    _instance: Optional['Container'] = None

    def __init__(self) -> None:
        self.config: ViewerConfig = get_config()
        self._loader_service: LoaderService | None = None
        self._view_service: ViewService | None = None

    @classmethod
    def get_instance(cls) -> 'Container':
        if cls._instance is None:
            cls._instance = Container()
        return cls._instance

    def get_loader_service(self) -> LoaderService:
        if not self._loader_service:
            self._loader_service = LoaderService()
        return self._loader_service

    def get_view_service(self) -> ViewService:
        if not self._view_service:
            self._view_service = ViewService(self.get_loader_service())
        return self._view_service


def get_container() -> Container:
    return Container.get_instance()
