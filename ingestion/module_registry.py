# ingestion/module_registry.py
"""
Resolve a module name and release version to its deployed contract address.

The endpoint serves
{"versions": [{"version": "1.6.0", "modules": [{"name": ..., "address": ...}]}]}
"""
from __future__ import annotations

from typing import Any

from common.utils import normalize_address
from ingestion.client import FetchError, HttpClient


class ModuleNotFound(LookupError):
    pass


def find_module_address(doc: Any, module: str, version: str) -> str:
    versions = doc.get("versions") if isinstance(doc, dict) else None
    if not isinstance(versions, list):
        raise FetchError("Module registry response has no 'versions' list")

    release = next((v for v in versions if v.get("version") == version), None)
    if release is None:
        raise ModuleNotFound(f"Version {version} not in module registry")

    entry = next((m for m in release.get("modules") or [] if m.get("name") == module), None)
    if entry is None:
        raise ModuleNotFound(f"Module {module} not deployed in version {version}")

    try:
        return normalize_address(entry.get("address"))
    except ValueError as e:
        raise FetchError(f"Module registry address for {module} {version}: {e}") from e


def fetch_module_address(client: HttpClient, endpoint: str, module: str, version: str) -> str:
    if not endpoint:
        raise ValueError("module registry endpoint is not configured")
    return find_module_address(client.get_json(endpoint), module, version)
