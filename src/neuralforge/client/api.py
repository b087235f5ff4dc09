from __future__ import annotations

import logging
from typing import Any

from neuralforge.client.errors import UserInputError
from neuralforge.client.invoker import DualTransportInvoker, TransportResult
from neuralforge.client.operations import (
    CALCULATE_CLUSTERS,
    CONVERT_FILES_TO_WAV,
    CREATE_PROJECT,
    GET_PROJECT_DATA,
    LIST_PROJECTS,
    OPEN_DIRECTORY_DIALOG,
    PROCESS_SPECTROGRAMS,
    SAVE_SELECTED_DIRECTORY,
    Operation,
)
from neuralforge.client.transports import BridgeCapability, BridgeTransport, HttpTransport
from neuralforge.config import AppConfig
from neuralforge.models import ProjectData, compose_project_name, filter_project_names

logger = logging.getLogger(__name__)


def _require(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise UserInputError(f"Please enter a {label}.")
    return value


class NeuralForgeClient:
    """Typed wrappers over the invoker, one coroutine per remote operation.

    Every method returns the operation's result shape or raises
    ``InvocationFailed``; ``UserInputError`` is raised before any transport
    is touched.
    """

    def __init__(self, invoker: DualTransportInvoker) -> None:
        self._invoker = invoker

    @classmethod
    def from_config(cls, config: AppConfig, bridge_api: object | None = None) -> NeuralForgeClient:
        capability = BridgeCapability.from_api(bridge_api) if bridge_api is not None else BridgeCapability.unavailable()
        http = HttpTransport(config.service_url, timeout=config.http_timeout)
        invoker = DualTransportInvoker(BridgeTransport(capability), http, prefer_bridge=config.use_bridge)
        return cls(invoker)

    @property
    def invoker(self) -> DualTransportInvoker:
        return self._invoker

    def close(self) -> None:
        self._invoker.close()

    async def __aenter__(self) -> NeuralForgeClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    async def _call(self, operation: Operation, *args: Any, prefer_bridge: bool | None) -> Any:
        result: TransportResult = await self._invoker.invoke(operation, *args, prefer_bridge=prefer_bridge)
        return result.unwrap()

    async def list_projects(self, *, prefer_bridge: bool | None = None) -> list[str]:
        names = await self._call(LIST_PROJECTS, prefer_bridge=prefer_bridge)
        return filter_project_names(names)

    async def create_project(
        self,
        base_name: str,
        supervised: bool,
        *,
        prefer_bridge: bool | None = None,
    ) -> str:
        """Create ``ns_<base_name>_sup`` (or ``_unsup``) and return that name."""
        base_name = _require(base_name, "project name").strip()
        project_name = compose_project_name(base_name, supervised)
        path = await self._call(CREATE_PROJECT, project_name, prefer_bridge=prefer_bridge)
        logger.info("created project %s at %s", project_name, path)
        return project_name

    async def open_directory_dialog(self, *, prefer_bridge: bool | None = None) -> str | None:
        return await self._call(OPEN_DIRECTORY_DIALOG, prefer_bridge=prefer_bridge)

    async def save_selected_directory(
        self,
        directory_path: str,
        project_name: str,
        *,
        prefer_bridge: bool | None = None,
    ) -> None:
        _require(directory_path, "folder")
        _require(project_name, "project")
        await self._call(SAVE_SELECTED_DIRECTORY, directory_path, project_name, prefer_bridge=prefer_bridge)

    async def get_project_data(self, project_name: str, *, prefer_bridge: bool | None = None) -> ProjectData:
        _require(project_name, "project")
        return await self._call(GET_PROJECT_DATA, project_name, prefer_bridge=prefer_bridge)

    async def convert_files_to_wav(self, project_name: str, *, prefer_bridge: bool | None = None) -> None:
        _require(project_name, "project")
        await self._call(CONVERT_FILES_TO_WAV, project_name, prefer_bridge=prefer_bridge)

    async def process_audio_chunks_and_spectrograms(
        self,
        project_name: str,
        *,
        prefer_bridge: bool | None = None,
    ) -> list[str]:
        _require(project_name, "project")
        return await self._call(PROCESS_SPECTROGRAMS, project_name, prefer_bridge=prefer_bridge)

    async def calculate_optimal_clusters(self, project_name: str, *, prefer_bridge: bool | None = None) -> int:
        _require(project_name, "project")
        return await self._call(CALCULATE_CLUSTERS, project_name, prefer_bridge=prefer_bridge)
