"""Command-line front-end over the same client and view-models the window uses.

The bridge is the in-process ``NeuralForgeApi``; ``--http-only`` talks to a
server-mode instance instead.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys

from neuralforge.app import NeuralForgeApi
from neuralforge.client.api import NeuralForgeClient
from neuralforge.config import AppConfig, load_config
from neuralforge.logging_utils import configure_logging
from neuralforge.projects import ProjectStore
from neuralforge.viewmodels import ProjectsViewModel, WorkflowViewModel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neuralforge-cli", description="Manage NeuralForge sound projects.")
    parser.add_argument("--http-only", action="store_true", help="skip the in-process bridge and use the HTTP service")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="list projects")

    create = commands.add_parser("create", help="create a project")
    create.add_argument("name", help="base project name, without prefix or suffix")
    create.add_argument("--unsupervised", action="store_true", help="create an unsupervised project")

    folder = commands.add_parser("select-folder", help="attach a source folder to a project")
    folder.add_argument("project")
    folder.add_argument("directory")

    for name, help_text in (
        ("show", "show the project's folder and files"),
        ("convert", "convert project files to WAV"),
        ("spectrograms", "chunk audio and generate spectrograms"),
        ("clusters", "estimate the optimal cluster count"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("project")
    return parser


def build_client(config: AppConfig, http_only: bool) -> NeuralForgeClient:
    if http_only:
        return NeuralForgeClient.from_config(dataclasses.replace(config, use_bridge=False))
    store = ProjectStore(config.home_dir)
    store.ensure_layout()
    return NeuralForgeClient.from_config(config, NeuralForgeApi(store, ffmpeg_binary=config.ffmpeg_binary))


async def run(args: argparse.Namespace, client: NeuralForgeClient) -> int:
    use_bridge = client.invoker.prefer_bridge
    if args.command in {"list", "create"}:
        projects = ProjectsViewModel(client, use_bridge=use_bridge)
        if args.command == "create":
            projects.set_project_name(args.name)
            if args.unsupervised:
                projects.toggle_supervised()
            created = await projects.create_project()
            state = projects.state
            if created is None:
                print(state.notice or state.status, file=sys.stderr)
                return 1
            print(created)
            return 0
        await projects.load_projects()
        if projects.state.status:
            print(projects.state.status, file=sys.stderr)
            return 1
        for name in projects.state.projects:
            print(name)
        return 0

    workflow = WorkflowViewModel(client, args.project, use_bridge=use_bridge)
    if args.command == "select-folder":
        ok = await workflow.use_folder(args.directory) is not None
    elif args.command == "show":
        ok = await workflow.refresh()
    elif args.command == "convert":
        ok = await workflow.convert_files()
    elif args.command == "spectrograms":
        ok = await workflow.process_spectrograms()
    else:
        ok = await workflow.calculate_clusters() is not None

    state = workflow.state
    if not ok:
        print(state.status, file=sys.stderr)
        return 1
    if state.status:
        print(state.status)
    if args.command == "show":
        print(f"folder: {state.selected_directory}")
        for group, files in state.file_list.items():
            for name in files:
                print(f"  {group}/{name}")
    return 0


async def _run_closing(args: argparse.Namespace, client: NeuralForgeClient) -> int:
    async with client:
        return await run(args, client)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    configure_logging("neuralforge-cli", dev=config.dev, console_level=logging.WARNING)
    return asyncio.run(_run_closing(args, build_client(config, args.http_only)))


if __name__ == "__main__":
    sys.exit(main())
