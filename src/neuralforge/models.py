from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

PROJECT_PREFIX = "ns_"
SUPERVISED_SUFFIX = "_sup"
UNSUPERVISED_SUFFIX = "_unsup"
ROOT_GROUP = "."


def is_project_name(name: Any) -> bool:
    return isinstance(name, str) and name.startswith(PROJECT_PREFIX)


def filter_project_names(names: list[Any]) -> list[str]:
    return [name for name in names if is_project_name(name)]


def compose_project_name(base_name: str, supervised: bool) -> str:
    suffix = SUPERVISED_SUFFIX if supervised else UNSUPERVISED_SUFFIX
    return f"{PROJECT_PREFIX}{base_name}{suffix}"


def project_mode(name: str) -> str | None:
    if name.endswith(UNSUPERVISED_SUFFIX):
        return "unsupervised"
    if name.endswith(SUPERVISED_SUFFIX):
        return "supervised"
    return None


@dataclass(frozen=True)
class ProjectData:
    selected_directory: str
    file_list: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def file_count(self) -> int:
        return sum(len(files) for files in self.file_list.values())

    @classmethod
    def from_dict(cls, data: Any) -> ProjectData:
        if not isinstance(data, dict):
            raise ValueError("project data must be an object")
        selected = data.get("selected_directory")
        if not isinstance(selected, str):
            raise ValueError("selected_directory missing from project data")
        raw_files = data.get("file_list") or {}
        if not isinstance(raw_files, dict):
            raise ValueError("file_list must be an object")
        file_list: dict[str, list[str]] = {}
        for group, files in raw_files.items():
            if not isinstance(files, list):
                raise ValueError(f"file_list[{group!r}] must be a list of file names")
            file_list[str(group)] = [str(name) for name in files]
        return cls(selected_directory=selected, file_list=file_list)


@dataclass(frozen=True)
class ClusterResult:
    wcss_values: list[float]
    optimal_k: int
