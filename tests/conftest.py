"""Shared test fixtures for archlint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from archlint.graph.builder import build
from archlint.graph.model import SourceFile

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from archlint.graph.model import Graph

MODULE = "example.com/app"


def source(rel_path: str, *imports: str, package: str | None = None) -> SourceFile:
    """Build a SourceFile; ``imports`` starting with ``/`` are made module-local."""
    file_name = rel_path.rsplit("/", 1)[-1]
    is_test = file_name.endswith("_test.go")
    base = file_name[: -len(".go")]
    if is_test:
        base = base[: -len("_test")]
    if package is None:
        directory = rel_path.rsplit("/", 1)[0] if "/" in rel_path else "main"
        package = directory.rsplit("/", 1)[-1]
    resolved = tuple(MODULE + imp if imp.startswith("/") else imp for imp in imports)
    return SourceFile(
        rel_path=rel_path,
        package=package,
        base_name=base,
        is_test=is_test,
        imports=resolved,
    )


def graph_of(*files: SourceFile) -> Graph:
    return build(list(files), MODULE)


def write_go(root: Path, rel_path: str, package: str, *imports: str, body: str = "") -> Path:
    """Write a Go file with the given package clause and imports."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"package {package}", ""]
    if imports:
        lines.append("import (")
        lines.extend(f'\t"{imp}"' for imp in imports)
        lines.append(")")
        lines.append("")
    if body:
        lines.append(body)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def go_project(tmp_path: Path) -> Path:
    """A project root holding only ``go.mod``."""
    project = tmp_path / "proj"
    project.mkdir()
    (project / "go.mod").write_text(f"module {MODULE}\n\ngo 1.22\n", encoding="utf-8")
    return project


@pytest.fixture()
def layered_project(go_project: Path) -> Path:
    """cmd -> pkg -> internal project that satisfies the default rules."""
    write_go(
        go_project,
        "cmd/api/main.go",
        "main",
        f"{MODULE}/pkg/server",
        body="func main() { server.Run() }",
    )
    write_go(
        go_project,
        "pkg/server/server.go",
        "server",
        "fmt",
        f"{MODULE}/internal/store",
        body='func Run() { fmt.Println(store.Name) }',
    )
    write_go(go_project, "internal/store/store.go", "store", body='const Name = "store"')
    return go_project


@pytest.fixture()
def make_project(go_project: Path) -> Callable[..., Path]:
    """Write ``.archlint.yml`` into the project and return its root."""

    def _make(config: str = "") -> Path:
        if config:
            (go_project / ".archlint.yml").write_text(config, encoding="utf-8")
        return go_project

    return _make
