"""Catalogue of the remote operations the front-end can invoke.

Each operation names the bridge method that implements it on the desktop host,
the key its result travels under in the bridge envelope, and, where the server
mode exposes an equivalent endpoint, the HTTP route used as fallback.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from neuralforge.models import ProjectData


def _identity(value: Any) -> Any:
    return value


def _none() -> None:
    return None


def _empty_list() -> list[str]:
    return []


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"expected a list of strings, got {type(value).__name__}")
    return [str(item) for item in value]


def _optional_string(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


def _cluster_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer cluster count, got {value!r}")
    return value


@dataclass(frozen=True)
class HttpRoute:
    method: str
    path: str
    # Maps the positional arguments to keyword arguments for requests (json/params).
    build: Callable[[Sequence[Any]], dict[str, Any]] = field(default=lambda args: {})


@dataclass(frozen=True)
class Operation:
    name: str
    bridge_method: str
    idempotent: bool
    result_key: str | None = None
    http: HttpRoute | None = None
    parse: Callable[[Any], Any] = _identity
    empty_result: Callable[[], Any] = _none
    # Only these may answer {"status": "cancelled"}, which yields None.
    cancellable: bool = False

    @property
    def has_http_fallback(self) -> bool:
        return self.http is not None


LIST_PROJECTS = Operation(
    name="list projects",
    bridge_method="list_projects",
    idempotent=True,
    result_key="projects",
    http=HttpRoute("GET", "/api/list-projects"),
    parse=_string_list,
    empty_result=_empty_list,
)

CREATE_PROJECT = Operation(
    name="create project",
    bridge_method="create_project",
    idempotent=False,
    result_key="path",
    http=HttpRoute("POST", "/api/create-project", build=lambda args: {"json": {"projectName": args[0]}}),
    parse=_optional_string,
)

OPEN_DIRECTORY_DIALOG = Operation(
    name="open directory dialog",
    bridge_method="open_directory_dialog",
    idempotent=True,
    result_key="path",
    parse=_optional_string,
    cancellable=True,
)

SAVE_SELECTED_DIRECTORY = Operation(
    name="save selected directory",
    bridge_method="save_selected_directory",
    idempotent=False,
)

GET_PROJECT_DATA = Operation(
    name="get project data",
    bridge_method="get_project_data",
    idempotent=True,
    result_key="project",
    parse=ProjectData.from_dict,
)

CONVERT_FILES_TO_WAV = Operation(
    name="convert files to wav",
    bridge_method="convert_files_to_wav",
    idempotent=False,
)

PROCESS_SPECTROGRAMS = Operation(
    name="process spectrograms",
    bridge_method="process_audio_chunks_and_spectrograms",
    idempotent=False,
    result_key="duplicates",
    parse=_string_list,
    empty_result=_empty_list,
)

CALCULATE_CLUSTERS = Operation(
    name="calculate clusters",
    bridge_method="calculate_optimal_clusters",
    idempotent=False,
    result_key="optimal_k",
    parse=_cluster_count,
)

OPERATIONS: dict[str, Operation] = {
    op.bridge_method: op
    for op in (
        LIST_PROJECTS,
        CREATE_PROJECT,
        OPEN_DIRECTORY_DIALOG,
        SAVE_SELECTED_DIRECTORY,
        GET_PROJECT_DATA,
        CONVERT_FILES_TO_WAV,
        PROCESS_SPECTROGRAMS,
        CALCULATE_CLUSTERS,
    )
}
