"""Analyzer configuration.

Settings come from environment variables, read once at startup:
- BUILDFACTS_CORE_COMPILE_TARGET: target whose compiler call is authoritative
- BUILDFACTS_COMPILER_TASKS: compiler task names (semicolon-separated)
- BUILDFACTS_COMPILER_EXECUTABLES: compiler binaries to drop from source files
- BUILDFACTS_BUILD_TREE: set to 0/false/no to disable tree construction
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CORE_COMPILE_TARGET = "CoreCompile"
DEFAULT_COMPILER_TASK_NAMES: tuple[str, ...] = ("Csc",)
DEFAULT_COMPILER_EXECUTABLES: tuple[str, ...] = ("csc.dll", "csc.exe")

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class AnalyzerConfig:
    """Settings that affect how build events are aggregated."""

    core_compile_target: str = DEFAULT_CORE_COMPILE_TARGET
    """Target name marking the authoritative compiler invocation."""

    compiler_task_names: tuple[str, ...] = DEFAULT_COMPILER_TASK_NAMES
    """Tasks whose command line messages are compiler invocations."""

    compiler_executables: tuple[str, ...] = DEFAULT_COMPILER_EXECUTABLES
    """Compiler binary file names, never reported as source files."""

    build_tree: bool = True
    """Whether the event processor builds a tree and produces snapshots."""

    def is_compiler_task(self, task_name: str | None) -> bool:
        """Check a task name against the configured compiler tasks."""
        if not task_name:
            return True
        return task_name.lower() in {name.lower() for name in self.compiler_task_names}


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(";") if part.strip())


def load_config_from_env(environ: Mapping[str, str] | None = None) -> AnalyzerConfig:
    """Build an AnalyzerConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Config with defaults for unset variables
    """
    env = os.environ if environ is None else environ

    core_compile_target = env.get("BUILDFACTS_CORE_COMPILE_TARGET", "").strip()
    tasks = _split_list(env.get("BUILDFACTS_COMPILER_TASKS", ""))
    executables = _split_list(env.get("BUILDFACTS_COMPILER_EXECUTABLES", ""))
    build_tree = env.get("BUILDFACTS_BUILD_TREE", "").strip().lower() not in _FALSE_VALUES

    return AnalyzerConfig(
        core_compile_target=core_compile_target or DEFAULT_CORE_COMPILE_TARGET,
        compiler_task_names=tasks or DEFAULT_COMPILER_TASK_NAMES,
        compiler_executables=executables or DEFAULT_COMPILER_EXECUTABLES,
        build_tree=build_tree,
    )


# Global configuration (set at startup)
_config: AnalyzerConfig = AnalyzerConfig()


def configure(config: AnalyzerConfig | None = None) -> AnalyzerConfig:
    """Set the process-wide config.

    Should be called once at server startup. Reads the environment when no
    config is given.
    """
    global _config
    _config = config if config is not None else load_config_from_env()
    logger.debug(
        f"Analyzer configured: core_compile={_config.core_compile_target}, "
        f"tasks={_config.compiler_task_names}, build_tree={_config.build_tree}"
    )
    return _config


def get_config() -> AnalyzerConfig:
    """Get current analyzer configuration."""
    return _config
