"""Performance sentinels (gated)."""

from __future__ import annotations

import zipfile

import pytest

from omodparse import parse_config_xml, parse_module_file
from omodparse._internal.benchmarks import (
    MAX_ARCHIVE_ROUNDTRIP_MS,
    MAX_LARGE_DESCRIPTOR_MS,
    build_large_config,
)

ENTRIES = 2000


def _assert_budget(benchmark, max_ms: float) -> None:
    mean_ms = benchmark.stats.stats.mean * 1000.0
    assert mean_ms < max_ms, f"Mean {mean_ms:.2f} ms exceeded budget {max_ms:.2f} ms"


@pytest.mark.perf
def test_large_descriptor_sentinel(benchmark):
    config = build_large_config(ENTRIES)
    descriptor = benchmark.pedantic(lambda: parse_config_xml(config), rounds=3, iterations=1)

    assert len(descriptor.required_modules) == ENTRIES
    assert len(descriptor.extension_points) == ENTRIES
    assert len(descriptor.advice_points) == ENTRIES
    assert len(descriptor.privileges) == ENTRIES
    assert len(descriptor.global_properties) == ENTRIES
    assert descriptor.warnings == ()

    _assert_budget(benchmark, MAX_LARGE_DESCRIPTOR_MS)


@pytest.mark.perf
def test_archive_roundtrip_sentinel(benchmark, tmp_path):
    path = tmp_path / "sentinel.omod"
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("config.xml", build_large_config(ENTRIES // 4))
        for i in range(200):
            archive.writestr(f"lib/dep{i}.jar", b"\0" * 1024)

    descriptor = benchmark.pedantic(lambda: parse_module_file(path), rounds=3, iterations=1)

    assert descriptor.module_id == "sentinel"
    assert len(descriptor.extension_points) == ENTRIES // 4

    _assert_budget(benchmark, MAX_ARCHIVE_ROUNDTRIP_MS)
