"""Watch mode: reload the type graph when declarations or sources change."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, Optional, Set

import typer
from rich.console import Console
from rich.markup import escape

from . import config
from .parser import SKIP_DIRS

console = Console()


class CodeChangeHandler:
    """Collect file events and fire one reload after a quiet period.

    Every relevant event restarts the debounce window; :meth:`flush` runs the
    callback once the window has elapsed with no new events.
    """

    def __init__(
        self,
        reload_callback: Callable[[Set[Path]], None],
        debounce_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        root: Optional[Path] = None,
    ):
        self.reload_callback = reload_callback
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.root = root
        self.last_event = 0.0
        self._pending_files: Set[Path] = set()
        self._lock = threading.Lock()

    def is_relevant(self, file_path: Path) -> bool:
        """True for watched source files outside vendor/output directories.

        Only the part of the path below :attr:`root` is checked, so a
        workspace that itself lives under e.g. ``build/`` is still watched.
        """
        if file_path.suffix not in config.SOURCE_EXTENSIONS:
            return False
        parts = file_path.parts
        if self.root is not None:
            try:
                parts = file_path.relative_to(self.root).parts
            except ValueError:
                return False
        return not any(part in SKIP_DIRS - {config.TACTICA_DIR} for part in parts)

    def dispatch(self, event) -> None:
        """Route watchdog events to the pending set."""
        if event.is_directory:
            return
        for attr in ("src_path", "dest_path"):
            raw = getattr(event, attr, None)
            if raw:
                self._handle_change(Path(raw))

    def _handle_change(self, file_path: Path) -> None:
        if not self.is_relevant(file_path):
            return
        with self._lock:
            self._pending_files.add(file_path)
            self.last_event = self.clock()

    def flush(self) -> bool:
        """Run the callback if events are pending and the window has passed."""
        with self._lock:
            if not self._pending_files:
                return False
            if self.clock() - self.last_event < self.debounce_seconds:
                return False
            files = set(self._pending_files)
            self._pending_files.clear()
        self.reload_callback(files)
        return True


def watch(
    workspace: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root to watch."),
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", help="Debounce interval in seconds (default from config)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Re-export the graph as JSON to this file after every reload."
    ),
):
    """👀 Watch mode — reload the type graph on file changes.

    Example:
      tg watch
      tg watch ./my-app --interval 2
      tg watch -o graph.json
    """
    try:
        from watchdog.events import FileSystemEventHandler
        from watchdog.observers import Observer
    except ImportError:
        console.print("[red]✗[/red] watchdog is not installed.")
        console.print("[dim]Install with: pip install watchdog[/dim]")
        raise typer.Exit(1)

    if not config.AUTO_REFRESH:
        console.print("[yellow]auto_refresh is disabled.[/yellow]")
        console.print("[dim]Enable with: tg config set auto_refresh true[/dim]")
        raise typer.Exit(1)

    from .graph_export import export_json
    from .loader import GraphProvider

    watch_path = workspace.resolve()
    provider = GraphProvider()
    reload_count = 0

    def reload_graph(changed: Set[Path]) -> None:
        nonlocal reload_count
        names = ", ".join(sorted(p.name for p in changed))
        provider.clear_cache()
        try:
            graph = provider.load_graph(watch_path)
        except OSError as exc:
            console.print(f"  [red]✗[/red] Reload failed: {escape(str(exc))}")
            return
        if output is not None:
            export_json(graph, output)
        reload_count += 1
        console.print(
            f"  [green]✓[/green] Reloaded ({escape(names)} changed): "
            f"{len(graph.nodes)} types, {len(graph.links)} links"
        )

    debounce = config.WATCH_DEBOUNCE if interval is None else interval
    handler = CodeChangeHandler(reload_graph, debounce_seconds=debounce, root=watch_path)

    # Initial load so the first export exists before any change
    reload_graph({watch_path})

    console.print(f"\n[bold green]👀 Watching[/bold green] [cyan]{escape(str(watch_path))}[/cyan] for changes...")
    console.print(f"[dim]  Debounce:  {debounce}s")
    console.print("  Press Ctrl+C to stop[/dim]\n")

    class WatchdogAdapter(FileSystemEventHandler):
        def on_modified(self, event):
            handler.dispatch(event)

        def on_created(self, event):
            handler.dispatch(event)

        def on_moved(self, event):
            handler.dispatch(event)

    observer = Observer()
    observer.schedule(WatchdogAdapter(), str(watch_path), recursive=True)
    observer.start()

    try:
        while True:
            time.sleep(0.2)
            handler.flush()
    except KeyboardInterrupt:
        observer.stop()
        console.print(f"\n[yellow]Stopped watching.[/yellow] Reloaded {reload_count} time(s).")

    observer.join()
