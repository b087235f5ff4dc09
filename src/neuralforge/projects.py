from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from neuralforge.models import ROOT_GROUP, ProjectData

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
FILE_LIST_FILE = "file_list.json"
SOUNDS_DIR = "sounds"
SPECTROGRAMS_DIR = "spectrograms"


class ProjectDataError(Exception):
    pass


def list_files_in_directory(directory: Path) -> dict[str, list[str]]:
    """Group every file below ``directory`` by its folder relative to it."""
    if not directory.is_dir():
        raise NotADirectoryError(f"not a directory: {directory}")
    grouped: dict[str, list[str]] = {}
    for current, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        files = sorted(name for name in filenames if not name.startswith("."))
        if not files:
            continue
        relative = Path(current).relative_to(directory).as_posix()
        grouped[relative or ROOT_GROUP] = files
    return grouped


class ProjectStore:
    def __init__(self, home_dir: Path) -> None:
        self._home_dir = home_dir
        self._projects_dir = home_dir / "projects"

    @property
    def projects_dir(self) -> Path:
        return self._projects_dir

    def ensure_layout(self) -> Path:
        self._projects_dir.mkdir(parents=True, exist_ok=True)
        return self._projects_dir

    def project_dir(self, project_name: str) -> Path:
        name = project_name.strip()
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise ValueError(f"Invalid project name: {project_name!r}")
        return self._projects_dir / name

    def list(self) -> list[str]:
        if not self._projects_dir.exists():
            return []
        return sorted(entry.name for entry in self._projects_dir.iterdir() if entry.is_dir())

    def create(self, project_name: str) -> Path:
        path = self.project_dir(project_name)
        path.mkdir(parents=True, exist_ok=True)
        logger.info("project directory ready: %s", path)
        return path

    def save_selected_directory(self, directory: Path, project_name: str) -> ProjectData:
        project_path = self.create(project_name)
        file_list = list_files_in_directory(directory)
        _write_json(project_path / CONFIG_FILE, {"selected_directory": str(directory)})
        _write_json(project_path / FILE_LIST_FILE, file_list)
        logger.info("saved %d files from %s into %s", sum(map(len, file_list.values())), directory, project_name)
        return ProjectData(selected_directory=str(directory), file_list=file_list)

    def get_project_data(self, project_name: str) -> ProjectData:
        project_path = self.project_dir(project_name)
        config = _read_json(project_path / CONFIG_FILE, "config file")
        if not isinstance(config, dict) or not isinstance(config.get("selected_directory"), str):
            raise ProjectDataError("selected_directory not found in config")
        file_list = _read_json(project_path / FILE_LIST_FILE, "file list")
        try:
            return ProjectData.from_dict({"selected_directory": config["selected_directory"], "file_list": file_list})
        except ValueError as exc:
            raise ProjectDataError(f"error reading file list: {exc}") from exc

    def sounds_dir(self, project_name: str) -> Path:
        return self.project_dir(project_name) / SOUNDS_DIR

    def spectrograms_dir(self, project_name: str) -> Path:
        return self.project_dir(project_name) / SPECTROGRAMS_DIR


def _read_json(path: Path, label: str) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise ProjectDataError(f"error reading {label}: {path.name} is missing") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ProjectDataError(f"error reading {label}: {exc}") from exc


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
    tmp_path.replace(path)
