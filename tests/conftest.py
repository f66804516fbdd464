"""Pytest fixtures for buildfacts-mcp tests."""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from buildfacts_mcp.analysis import ProjectItem  # noqa: E402
from buildfacts_mcp.events import BuildEvent, EventKind  # noqa: E402
from buildfacts_mcp.utils.paths import normalize_path  # noqa: E402

ROOT = os.path.abspath(os.sep)
APP_PROJECT = normalize_path(os.path.join(ROOT, "repo", "App", "App.csproj"))
LIB_PROJECT = normalize_path(os.path.join(ROOT, "repo", "Lib", "Lib.csproj"))

NET6_MONIKER = ".NETCoreApp,Version=v6.0"
NET48_MONIKER = ".NETFramework,Version=v4.8"


def project_started(project_file, properties=None, items=None):
    return BuildEvent(
        EventKind.PROJECT_STARTED,
        project_file=project_file,
        properties=properties or {},
        items=items or [],
    )


def project_finished(project_file, succeeded=True):
    return BuildEvent(EventKind.PROJECT_FINISHED, project_file=project_file, succeeded=succeeded)


def compile_events(command_line, target="CoreCompile", task="Csc"):
    """Target/task/command line events for one compiler call."""
    return [
        BuildEvent(EventKind.TARGET_STARTED, target_name=target),
        BuildEvent(EventKind.TASK_STARTED, task_name=task),
        BuildEvent(EventKind.MESSAGE, task_name=task, command_line=command_line),
        BuildEvent(EventKind.TASK_FINISHED, task_name=task, succeeded=True),
        BuildEvent(EventKind.TARGET_FINISHED, target_name=target, succeeded=True),
    ]


def framework_build(project_file, moniker, properties=None, items=None, command_line=None):
    """Events for one inner (single target framework) build of a project."""
    props = {"TargetFrameworkMoniker": moniker}
    props.update(properties or {})
    events = [project_started(project_file, props, items)]
    if command_line:
        events.extend(compile_events(command_line))
    events.append(project_finished(project_file))
    return events


def wrap_build(events, succeeded=True):
    return (
        [BuildEvent(EventKind.BUILD_STARTED, message="Build started.")]
        + events
        + [BuildEvent(EventKind.BUILD_FINISHED, succeeded=succeeded)]
    )


@pytest.fixture
def app_project():
    """Normalized path of the project under analysis."""
    return APP_PROJECT


@pytest.fixture
def multi_target_events():
    """Outer dispatching build of App.csproj with net6.0 and net48 inner builds."""
    net6 = framework_build(
        APP_PROJECT,
        NET6_MONIKER,
        properties={"TargetFramework": "net6.0", "DefineConstants": "NET6_0"},
        items=[
            ProjectItem("PackageReference", "Newtonsoft.Json", {"Version": "13.0.1"}),
            ProjectItem("Compile", "Program.cs"),
        ],
        command_line="dotnet exec csc.dll /reference:System.Runtime.dll /define:NET6_0 Program.cs",
    )
    net48 = framework_build(
        APP_PROJECT,
        NET48_MONIKER,
        properties={"TargetFramework": "net48", "DefineConstants": "NET48"},
        items=[ProjectItem("Compile", "Program.cs"), ProjectItem("Compile", "Legacy.cs")],
        command_line="csc.exe /reference:mscorlib.dll /define:NET48 Program.cs Legacy.cs",
    )
    return wrap_build(
        [
            project_started(APP_PROJECT, {"TargetFrameworks": "net6.0;net48"}),
            BuildEvent(EventKind.TARGET_STARTED, target_name="DispatchToInnerBuilds"),
            BuildEvent(EventKind.TASK_STARTED, task_name="MSBuild"),
            *net6,
            *net48,
            BuildEvent(EventKind.TASK_FINISHED, task_name="MSBuild", succeeded=True),
            BuildEvent(EventKind.TARGET_FINISHED, target_name="DispatchToInnerBuilds", succeeded=True),
            project_finished(APP_PROJECT),
        ]
    )


@pytest.fixture
def sample_event_dicts():
    """JSON form of a single target framework build."""
    return [
        {"kind": "BuildStarted", "timestamp": "2024-01-01T12:00:00", "message": "Build started."},
        {
            "kind": "ProjectStarted",
            "projectFile": APP_PROJECT,
            "properties": {"TargetFrameworkMoniker": NET6_MONIKER, "TargetFramework": "net6.0"},
            "items": [
                {"itemType": "PackageReference", "itemSpec": "Serilog", "metadata": {"Version": "3.1.1"}},
            ],
        },
        {"kind": "TargetStarted", "targetName": "CoreCompile"},
        {"kind": "TaskStarted", "taskName": "Csc"},
        {"kind": "Message", "taskName": "Csc", "commandLine": "csc.exe /reference:Foo.dll Program.cs"},
        {"kind": "TaskFinished", "taskName": "Csc", "succeeded": True},
        {"kind": "TargetFinished", "targetName": "CoreCompile", "succeeded": True},
        {"kind": "ProjectFinished", "projectFile": APP_PROJECT, "succeeded": True},
        {"kind": "BuildFinished", "succeeded": True},
    ]
