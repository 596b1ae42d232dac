"""
Runtime snapshot 載入

A snapshot is the JSON rendition of a loaded animation file (see
``runtime.SnapshotFile``). It can come from a local path or from an HTTP(S)
URL, e.g. a dev server exporting the live runtime state.
"""

import json
from typing import Optional

import requests

from .document import InspectionError
from .runtime import SnapshotFile


class SnapshotClient:
    """唯讀 HTTP 封裝，取得遠端 snapshot JSON."""

    def __init__(self, timeout: float = 10.0, token: Optional[str] = None):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def get_snapshot(self, url: str) -> dict:
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_snapshot(source: str, client: Optional[SnapshotClient] = None) -> dict:
    """讀取 snapshot（本機路徑或 URL），失敗時丟 InspectionError."""
    if not source:
        raise InspectionError("No snapshot given", "pass a path or URL, or set source.snapshot in the config")

    if is_url(source):
        client = client or SnapshotClient()
        try:
            data = client.get_snapshot(source)
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            raise InspectionError(f"HTTP {status} while fetching snapshot", str(e)) from e
        except (requests.RequestException, ValueError) as e:
            raise InspectionError("Could not fetch snapshot", str(e)) from e
    else:
        try:
            with open(source, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise InspectionError("Snapshot not found", source) from e
        except (OSError, ValueError) as e:
            raise InspectionError("Could not read snapshot", f"{source}: {e}") from e

    if not isinstance(data, dict):
        raise InspectionError("Malformed snapshot", f"expected a JSON object, got {type(data).__name__}")
    return data


def open_snapshot(source: str, client: Optional[SnapshotClient] = None) -> SnapshotFile:
    return SnapshotFile(load_snapshot(source, client))
