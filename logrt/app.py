"""Controller for log analysis runs and the command that starts them."""

from __future__ import annotations

import argparse
import queue
import shutil
import subprocess
import sys
import threading
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from logrt.analysis import (
    AnalysisFailed,
    Completed,
    FileProcessed,
    Update,
    default_output_dir,
    run_analysis,
)
from logrt.config import CommandConfig, ConfigError, load_commands


def clear_log_dir(log_dir: str | PathLike[str]) -> str:
    """Empty the log directory, recreating it, and describe what happened."""
    directory = Path(log_dir)
    if not directory.exists():
        return "Log directory does not exist."
    try:
        shutil.rmtree(directory)
    except OSError as exc:
        return f"Failed to clear log directory: {exc}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        return "Log directory cleared, but failed to recreate."
    return "Log directory cleared and recreated."


def open_with(command: CommandConfig, log_path: str | PathLike[str]) -> subprocess.Popen:
    """Start ``command`` on ``log_path`` without waiting for it."""
    return subprocess.Popen([command.executable, *command.expand_args(log_path)])


class LogAnalyzerApp:
    """State of the analyser: input path, chosen viewer and run progress."""

    def __init__(
        self,
        commands: list[CommandConfig] | None = None,
        log_output_dir: str | PathLike[str] | None = None,
        config_dir: str | PathLike[str] | None = None,
    ) -> None:
        self.log_output_dir = (
            Path(log_output_dir) if log_output_dir is not None else default_output_dir()
        )
        try:
            self.log_output_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        if commands is None:
            try:
                commands = load_commands(config_dir)
            except ConfigError as exc:
                print(f"Failed to load commands: {exc}", file=sys.stderr)
                commands = [CommandConfig("Error: commands.json missing/invalid", "", [])]
        self.commands = commands
        self.selected_command_index = 0
        self.path_to_analyze = ""
        self.sorted_output = True
        self.analysis_in_progress = False
        self.status_message = "Ready."
        self._updates: queue.Queue[Update] = queue.Queue()
        self._worker: threading.Thread | None = None

    @property
    def selected_command(self) -> CommandConfig | None:
        if 0 <= self.selected_command_index < len(self.commands):
            return self.commands[self.selected_command_index]
        return None

    def start_analysis(self) -> bool:
        """Start analysing ``path_to_analyze`` in the background; return whether it began."""
        if self.analysis_in_progress:
            return False
        text = self.path_to_analyze.strip()
        if not text:
            self.status_message = "Error: No path specified for analysis."
            return False
        path = Path(text)
        if not path.exists():
            self.status_message = "Error: Specified path does not exist."
            return False
        self.analysis_in_progress = True
        self.status_message = "Starting analysis..."
        self._worker = threading.Thread(
            target=run_analysis,
            args=(path, self._updates.put, self.sorted_output, self.log_output_dir),
            daemon=True,
        )
        self._worker.start()
        return True

    def poll(self) -> Update | None:
        """Handle the latest pending update, dropping earlier ones."""
        latest = None
        while True:
            try:
                latest = self._updates.get_nowait()
            except queue.Empty:
                break
        if latest is not None:
            self.handle_update(latest)
        return latest

    def wait(self, timeout: float | None = None) -> Update | None:
        """Block until the running analysis ends, then handle its outcome."""
        if self._worker is not None:
            self._worker.join(timeout)
        return self.poll()

    def _join_worker(self) -> None:
        worker, self._worker = self._worker, None
        if worker is not None and worker is not threading.current_thread():
            worker.join()

    def handle_update(self, update: Update) -> None:
        """Apply an update from the analysis to the status shown."""
        if isinstance(update, FileProcessed):
            self.status_message = f"Processing: {update.name}"
        elif isinstance(update, AnalysisFailed):
            self.status_message = f"Error: {update.message}"
            self.analysis_in_progress = False
            self._join_worker()
        elif isinstance(update, Completed):
            self.status_message = (
                f"Analysis complete {update.elapsed_ms} ms! "
                f"Log saved to: {update.log_path}"
            )
            self.analysis_in_progress = False
            self._join_worker()
            command = self.selected_command
            if command is not None and command.executable:
                try:
                    open_with(command, update.log_path)
                except OSError as exc:
                    self.status_message += (
                        f" | Failed to open with {command.description}: {exc}"
                    )
                else:
                    self.status_message += f" | Opened with: {command.description}"

    def clear_logs(self) -> None:
        """Remove every generated log."""
        self.status_message = clear_log_dir(self.log_output_dir)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="logrt", description="Gather log text from files, folders and archives."
    )
    parser.add_argument("path", nargs="?", help="file, archive or folder to analyse")
    parser.add_argument("--no-sort", action="store_true", help="keep the original order")
    parser.add_argument("--command", type=int, default=0, help="index of the viewer to open the log with")
    parser.add_argument("--list-commands", action="store_true", help="list the viewers and exit")
    parser.add_argument("--clear", action="store_true", help="remove generated logs")
    parser.add_argument("--config-dir", help="directory holding commands.json")
    parser.add_argument("--output-dir", help="directory for generated logs")
    args = parser.parse_args(argv)

    app = LogAnalyzerApp(log_output_dir=args.output_dir, config_dir=args.config_dir)

    if args.list_commands:
        for index, command in enumerate(app.commands):
            print(f"{index}: {command.description}")
        return 0

    if args.clear:
        app.clear_logs()
        print(app.status_message)
        if not args.path:
            return 0

    if not args.path:
        parser.print_usage(sys.stderr)
        return 2

    app.selected_command_index = args.command
    app.sorted_output = not args.no_sort
    app.path_to_analyze = args.path
    if not app.start_analysis():
        print(app.status_message, file=sys.stderr)
        return 1
    outcome = app.wait()
    print(app.status_message)
    return 0 if isinstance(outcome, Completed) else 1


if __name__ == "__main__":
    sys.exit(main())