"""Performance sentinel budgets and fixtures for descriptor parsing."""

from __future__ import annotations

import os


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_LARGE_DESCRIPTOR_MS = _budget_from_env("OMODPARSE_MAX_LARGE_DESCRIPTOR_MS", 500.0)
MAX_ARCHIVE_ROUNDTRIP_MS = _budget_from_env("OMODPARSE_MAX_ARCHIVE_ROUNDTRIP_MS", 250.0)


def build_large_config(entries: int = 2000) -> str:
    """A config.xml with ``entries`` of every repeated element kind."""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<module configVersion="1.6">',
        "<id>sentinel</id><name>Sentinel</name><package>org.example.sentinel</package>",
        "<version>1.0</version><description>Performance sentinel</description>",
        "<require_modules>",
    ]
    parts.extend(
        f'<require_module version="1.{i}">org.example.dep{i}</require_module>' for i in range(entries)
    )
    parts.append("</require_modules>")
    for i in range(entries):
        parts.append(f"<extension><point>org.example.point{i}</point><class>org.example.Ext{i}</class></extension>")
        parts.append(f"<advice><point>org.example.Service{i}</point><class>org.example.Advice{i}</class></advice>")
        parts.append(f"<privilege><name>Priv {i}</name><description>Privilege {i}</description></privilege>")
        parts.append(
            f"<globalProperty><property>sentinel.gp{i}</property>"
            f"<defaultValue>{i}</defaultValue><description>GP {i}</description></globalProperty>"
        )
    parts.append("</module>")
    return "\n".join(parts)
