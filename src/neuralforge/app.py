from __future__ import annotations

import logging
from functools import wraps
from pathlib import Path
from typing import Any, cast

import webview
from pydantic import BaseModel

from neuralforge.api_schema import ProjectNamePayload, SaveSelectedDirectoryPayload, parse_payload
from neuralforge.config import AppConfig, load_config
from neuralforge.logging_utils import configure_logging
from neuralforge.pipeline import AnalysisPort, UnconfiguredAnalysis, convert_files_to_wav
from neuralforge.projects import ProjectStore
from neuralforge.server import ProjectServer

logger = logging.getLogger(__name__)

ELBOW_RESULTS_FILE = "elbow_results.json"
FRONTEND_DIST = Path(__file__).resolve().parents[2] / "frontend" / "dist"


def _summarize_payload(value: Any) -> Any:
    if isinstance(value, dict):
        items = list(value.items())
        summary = {key: _summarize_payload(val) for key, val in items[:10]}
        if len(items) > 10:
            summary["..."] = f"{len(items) - 10} more"
        return summary
    if isinstance(value, (list, tuple)):
        if len(value) > 10:
            preview = [_summarize_payload(item) for item in value[:3]]
            preview.append(f"...({len(value) - 3} more)")
            return preview
        return [_summarize_payload(item) for item in value]
    if isinstance(value, str) and len(value) > 200:
        return f"{value[:200]}...(truncated)"
    return value


def _log_api_call(method: Any) -> Any:
    @wraps(method)
    def wrapper(self: NeuralForgeApi, *args: Any, **kwargs: Any) -> Any:
        logger.info(
            "api request %s args=%s kwargs=%s",
            method.__name__,
            _summarize_payload(args),
            _summarize_payload(kwargs),
        )
        result = method(self, *args, **kwargs)
        logger.info("api response %s result=%s", method.__name__, _summarize_payload(result))
        return result

    return wrapper


def _validated_payload[PayloadT: BaseModel](
    model: type[PayloadT],
    payload: dict[str, Any],
    method_name: str,
) -> PayloadT | dict[str, str]:
    parsed, error = parse_payload(model, payload)
    if error:
        logger.warning("api request %s invalid payload: %s", method_name, error)
        return {"status": "error", "message": error}
    if parsed is None:
        return {"status": "error", "message": "Invalid payload."}
    return cast(PayloadT, parsed)


class NeuralForgeApi:
    """Methods bound into the desktop window as ``window.pywebview.api``.

    Every public method returns an envelope: ``{"status": "ok", ...}``,
    ``{"status": "cancelled"}`` or ``{"status": "error", "message": ...}``.
    Nothing raises across the bridge.
    """

    def __init__(
        self,
        store: ProjectStore,
        analysis: AnalysisPort | None = None,
        ffmpeg_binary: str = "ffmpeg",
    ) -> None:
        self._store = store
        self._analysis: AnalysisPort = analysis if analysis is not None else UnconfiguredAnalysis()
        self._ffmpeg_binary = ffmpeg_binary

    def list_projects(self) -> dict[str, Any]:
        try:
            projects = self._store.list()
        except OSError as exc:
            logger.exception("list_projects failed")
            return {"status": "error", "message": f"Failed to list projects: {exc}"}
        return {"status": "ok", "projects": projects}

    def create_project(self, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(ProjectNamePayload, {"project_name": project_name}, "create_project")
        if isinstance(parsed, dict):
            return parsed
        try:
            path = self._store.create(parsed.project_name)
        except OSError as exc:
            logger.exception("create_project failed")
            return {"status": "error", "message": f"Failed to create project: {exc}"}
        return {"status": "ok", "path": str(path)}

    def open_directory_dialog(self) -> dict[str, Any]:
        window = webview.windows[0] if webview.windows else None
        if window is None:
            return {"status": "error", "message": "Window not ready"}
        result = window.create_file_dialog(webview.FileDialog.FOLDER)
        selection = _normalize_dialog_result(result)
        if selection is None:
            return {"status": "cancelled"}
        return {"status": "ok", "path": selection}

    def save_selected_directory(self, directory_path: str, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(
            SaveSelectedDirectoryPayload,
            {"directory_path": directory_path, "project_name": project_name},
            "save_selected_directory",
        )
        if isinstance(parsed, dict):
            return parsed
        directory = Path(parsed.directory_path).expanduser()
        if not directory.is_dir():
            return {"status": "error", "message": f"Folder not found: {directory}"}
        try:
            data = self._store.save_selected_directory(directory, parsed.project_name)
        except OSError as exc:
            logger.exception("save_selected_directory failed")
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "file_count": data.file_count()}

    def get_project_data(self, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(ProjectNamePayload, {"project_name": project_name}, "get_project_data")
        if isinstance(parsed, dict):
            return parsed
        try:
            data = self._store.get_project_data(parsed.project_name)
        except Exception as exc:
            logger.warning("get_project_data failed for %s: %s", parsed.project_name, exc)
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "project": data.to_dict()}

    def convert_files_to_wav(self, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(ProjectNamePayload, {"project_name": project_name}, "convert_files_to_wav")
        if isinstance(parsed, dict):
            return parsed
        try:
            data = self._store.get_project_data(parsed.project_name)
            written = convert_files_to_wav(data, self._store.sounds_dir(parsed.project_name), self._ffmpeg_binary)
        except Exception as exc:
            logger.exception("convert_files_to_wav failed")
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "converted": len(written)}

    def process_audio_chunks_and_spectrograms(self, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(
            ProjectNamePayload,
            {"project_name": project_name},
            "process_audio_chunks_and_spectrograms",
        )
        if isinstance(parsed, dict):
            return parsed
        spectrograms_dir = self._store.spectrograms_dir(parsed.project_name)
        try:
            spectrograms_dir.mkdir(parents=True, exist_ok=True)
            hashes = self._analysis.process_audio_chunks_and_spectrograms(
                self._store.sounds_dir(parsed.project_name),
                spectrograms_dir,
            )
        except Exception as exc:
            logger.exception("process_audio_chunks_and_spectrograms failed")
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "duplicates": list(hashes)}

    def calculate_optimal_clusters(self, project_name: str) -> dict[str, Any]:
        parsed = _validated_payload(ProjectNamePayload, {"project_name": project_name}, "calculate_optimal_clusters")
        if isinstance(parsed, dict):
            return parsed
        project_dir = self._store.project_dir(parsed.project_name)
        try:
            result = self._analysis.calculate_optimal_clusters(
                self._store.spectrograms_dir(parsed.project_name),
                project_dir / ELBOW_RESULTS_FILE,
            )
        except Exception as exc:
            logger.exception("calculate_optimal_clusters failed")
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "optimal_k": result.optimal_k, "wcss_values": list(result.wcss_values)}


def _normalize_dialog_result(result: Any) -> str | None:
    if isinstance(result, (list, tuple)):
        return str(result[0]) if result else None
    if isinstance(result, str):
        return result or None
    return None


def _wrap_api_methods() -> None:
    for name, attr in vars(NeuralForgeApi).items():
        if name.startswith("_"):
            continue
        if not callable(attr):
            continue
        if getattr(attr, "__wrapped__", None):
            continue
        setattr(NeuralForgeApi, name, _log_api_call(attr))


_wrap_api_methods()


def resolve_frontend_url(config: AppConfig, dist_dir: Path = FRONTEND_DIST) -> str:
    """Dev server in dev mode, otherwise the built front-end when it exists."""
    if config.dev:
        return config.dev_server_url
    index_path = dist_dir / "index.html"
    if index_path.exists():
        return str(index_path)
    logger.warning("no front-end build at %s; using %s", index_path, config.dev_server_url)
    return config.dev_server_url


def main() -> None:
    config = load_config()
    configure_logging(dev=config.dev)
    store = ProjectStore(config.home_dir)
    store.ensure_layout()
    logger.info("NeuralForge and projects directories are ready at %s", store.projects_dir)

    if config.server_mode:
        ProjectServer(store, config.server_host, config.port).serve_forever()
        return

    api = NeuralForgeApi(store, ffmpeg_binary=config.ffmpeg_binary)
    window = webview.create_window(
        "NeuralForge",
        url=resolve_frontend_url(config),
        js_api=api,
        width=1024,
        height=768,
        background_color="#1B2636",
    )
    if window is None:
        raise RuntimeError("Failed to create app window")
    webview.start(debug=config.dev, http_server=True)


if __name__ == "__main__":
    main()
