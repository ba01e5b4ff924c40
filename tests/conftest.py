"""pytest configuration and fixtures for appsync_router tests.

This module provides shared fixtures for testing the router, including a
recording bundler, a fresh EventBridge and helpers that lay out resolver
trees under ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable
from pathlib import Path

import pytest

from appsync_router import (
    AppsyncApiRouter,
    BaseBundler,
    BundlingOptions,
    CodeAsset,
    EventBridge,
    InMemoryResourceGraph,
    RouterConfig,
    fingerprint,
)


class RecordingBundler(BaseBundler):
    """Bundler that hashes entry files without building anything."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, BundlingOptions | None]] = []

    def bundle(self, entry_file: Path, options: BundlingOptions | None = None) -> CodeAsset:
        self.calls.append((Path(entry_file), options))
        return CodeAsset(asset_hash=fingerprint(entry_file, options), entry_file=Path(entry_file))

    @property
    def bundled_names(self) -> list[str]:
        return [path.name for path, _ in self.calls]


def make_tree(root: Path, paths: Iterable[str]) -> Path:
    """Create files (and directories ending in "/") below root."""
    root.mkdir(parents=True, exist_ok=True)
    for relative in paths:
        target = root / relative
        if relative.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f"// {relative}\nexport function request(ctx) {{ return {{}} }}\n")
    return root


@pytest.fixture
def bundler() -> RecordingBundler:
    """Provide a fresh RecordingBundler."""
    return RecordingBundler()


@pytest.fixture
def resource_graph() -> InMemoryResourceGraph:
    """Provide an empty in-memory resource graph."""
    return InMemoryResourceGraph()


@pytest.fixture
def event_bridge() -> Generator[EventBridge, None, None]:
    """Provide a fresh, started EventBridge for each test."""
    EventBridge.reset_instance()
    bridge = EventBridge.instance()
    bridge.start()
    yield bridge
    bridge.stop()
    EventBridge.reset_instance()


@pytest.fixture
def api_dir(tmp_path: Path) -> Path:
    """Provide an API base directory with a schema and an empty resolvers folder."""
    base = tmp_path / "blog"
    (base / "resolvers").mkdir(parents=True)
    (base / "schema.graphql").write_text("type Query { getUser(id: ID!): User }\n")
    return base


@pytest.fixture
def build_router(
    api_dir: Path,
    bundler: RecordingBundler,
    resource_graph: InMemoryResourceGraph,
    event_bridge: EventBridge,
) -> Callable[..., AppsyncApiRouter]:
    """Provide a factory laying out resolver files then constructing a router."""

    def _build(resolvers: Iterable[str] = (), **config: object) -> AppsyncApiRouter:
        make_tree(api_dir / "resolvers", resolvers)
        return AppsyncApiRouter(
            "blog",
            RouterConfig(base_dir=api_dir, **config),
            bundler=bundler,
            resource_graph=resource_graph,
            event_bridge=event_bridge,
        )

    return _build
