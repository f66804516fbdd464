"""MCP Server for build facts analysis."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import Context, FastMCP
from pydantic import AnyUrl

from .analysis import BuildSnapshot
from .commandline import enumerate_command_line_parts, parse_command_line
from .config import get_config
from .events import BuildEvent, EventProcessor, parse_event, read_event_log
from .utils.paths import normalize_path

logger = logging.getLogger(__name__)

RESULTS_URI = "build://results"


class ResultStore:
    """Last analysis results per project (single client mode)."""

    def __init__(self):
        self._results: dict[str, list[BuildSnapshot]] = {}

    def set(self, project_path: str, results: list[BuildSnapshot]) -> None:
        self._results[normalize_path(project_path)] = results

    def get(self, project_path: str | None = None) -> dict[str, list[BuildSnapshot]]:
        """Get stored results, optionally for one project."""
        if project_path is None:
            return dict(self._results)
        key = normalize_path(project_path)
        return {key: self._results[key]} if key in self._results else {}

    def to_dict(self, project_path: str | None = None) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            path: [snapshot.to_dict() for snapshot in results]
            for path, results in self.get(project_path).items()
        }


_store: ResultStore | None = None


def get_store() -> ResultStore:
    """Get or create the result store."""
    global _store
    if _store is None:
        _store = ResultStore()
    return _store


def analyze_events(
    project_path: str,
    events: list[BuildEvent],
    build_tree: bool | None = None,
) -> list[BuildSnapshot]:
    """Run one aggregation pass over a list of events.

    Args:
        project_path: Project file whose builds are collected
        events: Build events in arrival order
        build_tree: Override the configured tree construction setting

    Returns:
        One snapshot per target framework
    """
    config = get_config()
    analyze = config.build_tree if build_tree is None else build_tree
    processor = EventProcessor(project_path, analyze=analyze, config=config)
    processor.process_all(events)
    if not processor.build_finished:
        logger.warning(f"Event stream for {project_path} ended without BuildFinished")
    return processor.get_results()


def describe_command_line(command_line: str) -> dict[str, Any]:
    """Tokenized and classified view of a command line."""
    return {
        "parts": list(enumerate_command_line_parts(command_line)),
        "arguments": [arg.to_dict() for arg in parse_command_line(command_line)],
    }


def create_server() -> FastMCP:
    """Create and configure the MCP server."""
    mcp = FastMCP("buildfacts-mcp")
    store = get_store()

    async def notify_results_changed(ctx: Context) -> None:
        """Notify client that build://results resource has changed."""
        try:
            if ctx.session:
                await ctx.session.send_resource_updated(AnyUrl(RESULTS_URI))
        except Exception:
            pass  # Notification failure shouldn't break the tool

    # ============== Command Line Tools ==============

    @mcp.tool()
    async def parse_compiler_command_line(command_line: str) -> dict:
        """
        Split a compiler command line into parts and classified arguments.

        Quotes are removed, \\" is an escaped quote, and /name:value switches
        are separated into switch name and value. The first argument is the
        invoked program.

        Args:
            command_line: Command line text as logged by the build
        """
        try:
            return {"success": True, "data": describe_command_line(command_line)}
        except Exception as e:
            return {"success": False, "error": str(e)}

    # ============== Analysis Tools ==============

    @mcp.tool()
    async def analyze_build_events(
        ctx: Context,
        project_path: str,
        events: list[dict[str, Any]],
        build_tree: bool | None = None,
    ) -> dict:
        """
        Aggregate a list of build events into per-target-framework results.

        Each event is an object with a "kind" (BuildStarted, ProjectStarted,
        TargetStarted, Message, ...) and camelCase payload fields such as
        projectFile, properties, items, targetName, taskName, commandLine.

        Args:
            project_path: Path to the project file to collect results for
            events: Build events in the order the engine raised them
            build_tree: Build the event tree (no results are produced without it).
                Defaults to the server setting (BUILDFACTS_BUILD_TREE, --no-build-tree)
        """
        try:
            parsed = [parse_event(event) for event in events]
            results = analyze_events(project_path, parsed, build_tree=build_tree)
            store.set(project_path, results)
            await notify_results_changed(ctx)
            return {"success": True, "data": [r.to_dict() for r in results]}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def analyze_event_log(ctx: Context, project_path: str, log_path: str) -> dict:
        """
        Aggregate a JSON Lines build event log into per-target-framework results.

        Args:
            project_path: Path to the project file to collect results for
            log_path: Path to the event log (one event object per line)
        """
        try:
            results = analyze_events(project_path, list(read_event_log(log_path)))
            store.set(project_path, results)
            await notify_results_changed(ctx)
            return {"success": True, "data": [r.to_dict() for r in results]}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def get_analysis_results(project_path: str | None = None) -> dict:
        """
        Get results of previous analyses, keyed by normalized project path.

        Args:
            project_path: Only return results for this project
        """
        try:
            return {"success": True, "data": store.to_dict(project_path)}
        except Exception as e:
            return {"success": False, "error": str(e)}

    # ============== Resources ==============

    @mcp.resource(RESULTS_URI, mime_type="application/json")
    async def build_results_resource() -> str:
        """Last analysis results (JSON).

        Contains: per project, one entry per target framework with source files,
        references, package references and properties.
        Updates when: an analysis tool completes.
        """
        return json.dumps(store.to_dict(), indent=2)

    logger.info("Build facts MCP Server initialized")
    return mcp
