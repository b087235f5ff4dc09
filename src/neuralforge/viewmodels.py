"""Per-screen view-models.

State is an immutable dataclass; every operation awaits a client call and then
replaces the state as a whole. Failed calls only touch ``status``/``notice`` so
whatever was last displayed stays on screen.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any

from neuralforge.client.api import NeuralForgeClient
from neuralforge.client.errors import InvocationFailed, UserInputError
from neuralforge.models import project_mode

logger = logging.getLogger(__name__)

StateListener = Callable[[Any], None]


@dataclass(frozen=True)
class ProjectsState:
    projects: tuple[str, ...] = ()
    project_name: str = ""
    use_bridge: bool = True
    is_supervised: bool = True
    selected_project: str | None = None
    notice: str | None = None
    status: str | None = None


class ProjectsViewModel:
    def __init__(
        self,
        client: NeuralForgeClient,
        *,
        use_bridge: bool = True,
        on_select_project: Callable[[str], None] | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._client = client
        self._state = ProjectsState(use_bridge=use_bridge)
        self._on_select_project = on_select_project
        self._listener = listener

    @property
    def state(self) -> ProjectsState:
        return self._state

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        if self._listener is not None:
            self._listener(self._state)

    def set_project_name(self, name: str) -> None:
        self._update(project_name=name, notice=None)

    def toggle_use_bridge(self) -> None:
        self._update(use_bridge=not self._state.use_bridge)

    def toggle_supervised(self) -> None:
        self._update(is_supervised=not self._state.is_supervised)

    async def load_projects(self) -> None:
        try:
            projects = await self._client.list_projects(prefer_bridge=self._state.use_bridge)
        except InvocationFailed as exc:
            logger.error("failed to load projects: %s", exc)
            self._update(status=f"Failed to load projects: {exc}")
            return
        self._update(projects=tuple(projects), status=None)

    async def create_project(self) -> str | None:
        state = self._state
        try:
            created = await self._client.create_project(
                state.project_name,
                state.is_supervised,
                prefer_bridge=state.use_bridge,
            )
        except UserInputError as exc:
            self._update(notice=str(exc))
            return None
        except InvocationFailed as exc:
            logger.error("failed to create project: %s", exc)
            self._update(status=f"Failed to create project: {exc}")
            return None
        self._update(project_name="", notice=None, status=f"Created {created}.")
        await self.load_projects()
        return created

    def select_project(self, name: str) -> None:
        self._update(selected_project=name)
        if self._on_select_project is not None:
            self._on_select_project(name)


@dataclass(frozen=True)
class WorkflowState:
    project_name: str
    selected_directory: str | None = None
    file_list: dict[str, list[str]] = field(default_factory=dict)
    duplicates: tuple[str, ...] = ()
    optimal_k: int | None = None
    busy_step: str | None = None
    status: str | None = None

    @property
    def mode(self) -> str | None:
        return project_mode(self.project_name)


class WorkflowViewModel:
    """Unsupervised dataset workflow: folder, conversion, spectrograms, clusters."""

    def __init__(
        self,
        client: NeuralForgeClient,
        project_name: str,
        *,
        use_bridge: bool | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._client = client
        self._use_bridge = use_bridge
        self._state = WorkflowState(project_name=project_name)
        self._listener = listener

    @property
    def state(self) -> WorkflowState:
        return self._state

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        if self._listener is not None:
            self._listener(self._state)

    async def _step(self, step: str, action: Callable[[], Awaitable[Any]]) -> tuple[bool, Any]:
        self._update(busy_step=step)
        try:
            result = await action()
        except (InvocationFailed, UserInputError) as exc:
            logger.error("%s failed for %s: %s", step, self._state.project_name, exc)
            self._update(busy_step=None, status=f"{step} failed: {exc}")
            return False, None
        self._update(busy_step=None)
        return True, result

    async def refresh(self) -> bool:
        ok, data = await self._step(
            "Load project",
            lambda: self._client.get_project_data(self._state.project_name, prefer_bridge=self._use_bridge),
        )
        if not ok:
            return False
        self._update(selected_directory=data.selected_directory, file_list=data.file_list)
        return True

    async def select_folder(self) -> str | None:
        ok, path = await self._step(
            "Select folder",
            lambda: self._client.open_directory_dialog(prefer_bridge=self._use_bridge),
        )
        if not ok:
            return None
        if path is None:
            self._update(status="Folder selection cancelled.")
            return None
        return await self.use_folder(path)

    async def use_folder(self, path: str) -> str | None:
        ok, _ = await self._step(
            "Save folder",
            lambda: self._client.save_selected_directory(
                path, self._state.project_name, prefer_bridge=self._use_bridge
            ),
        )
        if not ok:
            return None
        if await self.refresh():
            self._update(status=f"Selected {path}.")
        return path

    async def convert_files(self) -> bool:
        ok, _ = await self._step(
            "Conversion",
            lambda: self._client.convert_files_to_wav(self._state.project_name, prefer_bridge=self._use_bridge),
        )
        if not ok:
            return False
        if await self.refresh():
            self._update(status="All files have been converted to WAV.")
        return True

    async def process_spectrograms(self) -> bool:
        ok, hashes = await self._step(
            "Spectrogram generation",
            lambda: self._client.process_audio_chunks_and_spectrograms(
                self._state.project_name, prefer_bridge=self._use_bridge
            ),
        )
        if not ok:
            return False
        self._update(duplicates=tuple(hashes))
        if await self.refresh():
            self._update(status=f"Generated spectrograms for {len(hashes)} chunks.")
        return True

    async def calculate_clusters(self) -> int | None:
        ok, optimal_k = await self._step(
            "Cluster calculation",
            lambda: self._client.calculate_optimal_clusters(self._state.project_name, prefer_bridge=self._use_bridge),
        )
        if not ok:
            return None
        self._update(optimal_k=optimal_k, status=f"Optimal number of clusters: {optimal_k}.")
        return optimal_k
