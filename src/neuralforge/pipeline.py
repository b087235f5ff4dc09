"""Project processing steps that run on the desktop host.

Conversion to WAV shells out to ffmpeg. Chunking, spectrogram generation and
cluster estimation are provided by an ``AnalysisPort`` implementation handed to
the bridge API; without one those steps report that no analyzer is configured.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from neuralforge.models import ClusterResult, ProjectData

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess[Any]]


class ConversionError(RuntimeError):
    pass


class AnalysisUnavailable(RuntimeError):
    pass


class AnalysisPort(Protocol):
    def process_audio_chunks_and_spectrograms(self, sounds_dir: Path, spectrograms_dir: Path) -> list[str]: ...

    def calculate_optimal_clusters(self, spectrograms_dir: Path, results_path: Path) -> ClusterResult: ...


class UnconfiguredAnalysis:
    def process_audio_chunks_and_spectrograms(self, sounds_dir: Path, spectrograms_dir: Path) -> list[str]:
        raise AnalysisUnavailable("No spectrogram analyzer is configured.")

    def calculate_optimal_clusters(self, spectrograms_dir: Path, results_path: Path) -> ClusterResult:
        raise AnalysisUnavailable("No cluster analyzer is configured.")


def wav_target(sounds_dir: Path, file_name: str) -> Path:
    return sounds_dir / f"{Path(file_name).stem}.wav"


def convert_files_to_wav(
    data: ProjectData,
    sounds_dir: Path,
    ffmpeg_binary: str = "ffmpeg",
    runner: Runner = subprocess.run,
) -> list[Path]:
    """Copy or convert every listed source file into ``sounds_dir`` as WAV.

    Files sharing a stem across folders overwrite each other, last one wins.
    """
    sounds_dir.mkdir(parents=True, exist_ok=True)
    source_root = Path(data.selected_directory)
    written: list[Path] = []
    for folder, files in data.file_list.items():
        for file_name in files:
            source = source_root / folder / file_name
            target = wav_target(sounds_dir, file_name)
            if source.suffix.lower() == ".wav":
                try:
                    shutil.copyfile(source, target)
                except OSError as exc:
                    raise ConversionError(f"error copying WAV file {source}: {exc}") from exc
            else:
                _run_ffmpeg(ffmpeg_binary, source, target, runner)
            written.append(target)
    logger.info("converted %d files into %s", len(written), sounds_dir)
    return written


def _run_ffmpeg(binary: str, source: Path, target: Path, runner: Runner) -> None:
    command = [binary, "-y", "-i", str(source), str(target)]
    try:
        completed = runner(command, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise ConversionError(f"ffmpeg executable not found: {binary}") from exc
    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip().splitlines()
        detail = stderr[-1] if stderr else f"exit code {completed.returncode}"
        logger.warning("ffmpeg failed for %s: %s", source, detail)
        raise ConversionError(f"error converting {source.name} to WAV: {detail}")
