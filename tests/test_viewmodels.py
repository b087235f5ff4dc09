import asyncio

from helpers import FakeResponse, FakeSession, RecordingBridge, build_invoker, failing

from neuralforge.client.api import NeuralForgeClient
from neuralforge.viewmodels import ProjectsState, ProjectsViewModel, WorkflowViewModel


def _projects_vm(bridge: RecordingBridge, session: FakeSession | None = None) -> ProjectsViewModel:
    client = NeuralForgeClient(build_invoker(bridge, session or FakeSession()))
    return ProjectsViewModel(client)


def test_load_projects_shows_filtered_names() -> None:
    vm = _projects_vm(RecordingBridge(list_projects=lambda: {"status": "ok", "projects": ["ns_a", "ns_b", "x"]}))

    asyncio.run(vm.load_projects())

    assert vm.state.projects == ("ns_a", "ns_b")
    assert vm.state.status is None


def test_no_content_fallback_shows_empty_list() -> None:
    vm = _projects_vm(RecordingBridge(list_projects=failing()), FakeSession(FakeResponse(204)))

    asyncio.run(vm.load_projects())

    assert vm.state.projects == ()
    assert vm.state.status is None


def test_failed_reload_keeps_last_listing() -> None:
    responses = iter([{"status": "ok", "projects": ["ns_a"]}])

    def list_projects() -> dict[str, object]:
        return next(responses, {"status": "error", "message": "gone"})

    session = FakeSession(FakeResponse(500, "down", content_type="text/plain"))
    vm = _projects_vm(RecordingBridge(list_projects=list_projects), session)

    asyncio.run(vm.load_projects())
    asyncio.run(vm.load_projects())

    assert vm.state.projects == ("ns_a",)
    assert vm.state.status is not None
    assert "500" in vm.state.status


def test_create_without_name_gives_inline_notice() -> None:
    bridge = RecordingBridge(create_project=lambda name: {"status": "ok", "path": "/p"})
    vm = _projects_vm(bridge)

    result = asyncio.run(vm.create_project())

    assert result is None
    assert vm.state.notice == "Please enter a project name."
    assert bridge.calls == []


def test_create_then_reload_after_creation_settles() -> None:
    created: list[str] = []

    def create_project(name: str) -> dict[str, object]:
        created.append(name)
        return {"status": "ok", "path": f"/p/{name}"}

    bridge = RecordingBridge(
        create_project=create_project,
        list_projects=lambda: {"status": "ok", "projects": list(created)},
    )
    vm = _projects_vm(bridge)
    vm.set_project_name("owls")
    vm.toggle_supervised()

    result = asyncio.run(vm.create_project())

    assert result == "ns_owls_unsup"
    assert [name for name, _ in bridge.calls] == ["create_project", "list_projects"]
    assert vm.state.projects == ("ns_owls_unsup",)
    assert vm.state.project_name == ""


def test_toggle_use_bridge_routes_to_http() -> None:
    bridge = RecordingBridge(list_projects=lambda: {"status": "ok", "projects": ["ns_bridge"]})
    session = FakeSession(FakeResponse(200, ["ns_http"]))
    vm = _projects_vm(bridge, session)

    vm.toggle_use_bridge()
    asyncio.run(vm.load_projects())

    assert vm.state.use_bridge is False
    assert vm.state.projects == ("ns_http",)
    assert bridge.calls == []


def test_select_project_notifies_parent_and_listener() -> None:
    selected: list[str] = []
    states: list[ProjectsState] = []
    client = NeuralForgeClient(build_invoker(RecordingBridge(), FakeSession()))
    vm = ProjectsViewModel(client, on_select_project=selected.append, listener=states.append)

    vm.select_project("ns_a_sup")

    assert selected == ["ns_a_sup"]
    assert states[-1].selected_project == "ns_a_sup"


def _workflow_bridge(snapshots: list[dict[str, object]], **extra: object) -> RecordingBridge:
    def get_project_data(name: str) -> dict[str, object]:
        return {"status": "ok", "project": snapshots[-1]}

    return RecordingBridge(get_project_data=get_project_data, **extra)  # type: ignore[arg-type]


def test_select_folder_saves_and_refetches() -> None:
    snapshots: list[dict[str, object]] = [{"selected_directory": "/old", "file_list": {}}]

    def save_selected_directory(path: str, name: str) -> dict[str, object]:
        snapshots.append({"selected_directory": path, "file_list": {".": ["a.mp3"]}})
        return {"status": "ok", "file_count": 1}

    bridge = _workflow_bridge(
        snapshots,
        open_directory_dialog=lambda: {"status": "ok", "path": "/data/new"},
        save_selected_directory=save_selected_directory,
    )
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    path = asyncio.run(vm.select_folder())

    assert path == "/data/new"
    assert vm.state.selected_directory == "/data/new"
    assert vm.state.file_list == {".": ["a.mp3"]}
    assert vm.state.busy_step is None
    assert vm.state.mode == "unsupervised"
    assert bridge.calls[1] == ("save_selected_directory", ("/data/new", "ns_birds_unsup"))


def test_cancelled_folder_dialog_changes_nothing() -> None:
    bridge = _workflow_bridge(
        [{"selected_directory": "/old", "file_list": {}}],
        open_directory_dialog=lambda: {"status": "cancelled"},
    )
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.select_folder()) is None
    assert vm.state.selected_directory is None
    assert vm.state.status == "Folder selection cancelled."


def test_conversion_failure_keeps_state_and_reports() -> None:
    bridge = _workflow_bridge(
        [{"selected_directory": "/data", "file_list": {".": ["a.mp3"]}}],
        convert_files_to_wav=lambda name: {"status": "error", "message": "ffmpeg executable not found: ffmpeg"},
    )
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")
    asyncio.run(vm.refresh())

    assert asyncio.run(vm.convert_files()) is False
    assert vm.state.selected_directory == "/data"
    assert vm.state.status is not None
    assert "ffmpeg executable not found" in vm.state.status


def test_processing_and_clusters_update_results() -> None:
    bridge = _workflow_bridge(
        [{"selected_directory": "/data", "file_list": {".": ["a.wav"]}}],
        process_audio_chunks_and_spectrograms=lambda name: {"status": "ok", "duplicates": ["abc", "def"]},
        calculate_optimal_clusters=lambda name: {"status": "ok", "optimal_k": 3},
    )
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.process_spectrograms()) is True
    assert asyncio.run(vm.calculate_clusters()) == 3
    assert vm.state.duplicates == ("abc", "def")
    assert vm.state.optimal_k == 3
    assert vm.state.status == "Optimal number of clusters: 3."


def test_convert_files_refetches_project_data() -> None:
    snapshots: list[dict[str, object]] = [{"selected_directory": "/data", "file_list": {".": ["a.mp3"]}}]

    def convert_files_to_wav(name: str) -> dict[str, object]:
        snapshots.append({"selected_directory": "/data", "file_list": {".": ["a.mp3", "b.mp3"]}})
        return {"status": "ok", "converted": 2}

    bridge = _workflow_bridge(snapshots, convert_files_to_wav=convert_files_to_wav)
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.convert_files()) is True
    assert [name for name, _ in bridge.calls] == ["convert_files_to_wav", "get_project_data"]
    assert vm.state.selected_directory == "/data"
    assert vm.state.file_list == {".": ["a.mp3", "b.mp3"]}
    assert vm.state.status == "All files have been converted to WAV."


def test_process_spectrograms_refetches_project_data() -> None:
    snapshots: list[dict[str, object]] = [{"selected_directory": "/old", "file_list": {}}]

    def process(name: str) -> dict[str, object]:
        snapshots.append({"selected_directory": "/data", "file_list": {".": ["a.wav"]}})
        return {"status": "ok", "duplicates": ["abc"]}

    bridge = _workflow_bridge(snapshots, process_audio_chunks_and_spectrograms=process)
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.process_spectrograms()) is True
    assert [name for name, _ in bridge.calls] == ["process_audio_chunks_and_spectrograms", "get_project_data"]
    assert vm.state.selected_directory == "/data"
    assert vm.state.file_list == {".": ["a.wav"]}
    assert vm.state.duplicates == ("abc",)


def test_failed_steps_do_not_refetch() -> None:
    bridge = _workflow_bridge(
        [{"selected_directory": "/data", "file_list": {}}],
        convert_files_to_wav=lambda name: {"status": "error", "message": "disk full"},
        process_audio_chunks_and_spectrograms=failing("no analyzer"),
    )
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.convert_files()) is False
    assert asyncio.run(vm.process_spectrograms()) is False
    assert [name for name, _ in bridge.calls] == ["convert_files_to_wav", "process_audio_chunks_and_spectrograms"]
    assert vm.state.selected_directory is None


def test_malformed_snapshot_becomes_status_message() -> None:
    bridge = _workflow_bridge([{"selected_directory": "/data", "file_list": {"a": 5}}])
    vm = WorkflowViewModel(NeuralForgeClient(build_invoker(bridge, FakeSession())), "ns_birds_unsup")

    assert asyncio.run(vm.refresh()) is False
    assert vm.state.selected_directory is None
    assert vm.state.status is not None
    assert vm.state.status.startswith("Load project failed")


def test_cancelled_listing_reloads_from_http() -> None:
    bridge = RecordingBridge(list_projects=lambda: {"status": "cancelled"})
    vm = _projects_vm(bridge, FakeSession(FakeResponse(200, ["ns_http"])))

    asyncio.run(vm.load_projects())

    assert vm.state.projects == ("ns_http",)
    assert vm.state.status is None
