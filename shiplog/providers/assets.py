"""Asset upload pipeline: normalize, expand, upload each file in isolation.

A failure to read or upload one file is reported and recorded in the
AssetReport; the remaining files are still uploaded.
"""

from __future__ import annotations

import glob
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from shiplog.core.result import Err, Result
from shiplog.output.console import ConsoleProtocol
from shiplog.platform.http import HttpError

AssetInput = str | Sequence[str] | None

# (file name, file content) -> public URL of the uploaded file, if known
UploadOne = Callable[[str, bytes], Result[str | None, HttpError]]


@dataclass(frozen=True, slots=True)
class UploadedAsset:
    name: str
    path: Path
    url: str | None = None


@dataclass(frozen=True, slots=True)
class AssetFailure:
    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class AssetReport:
    uploaded: tuple[UploadedAsset, ...] = ()
    failed: tuple[AssetFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed


def normalize_assets(assets: AssetInput) -> list[str]:
    """Flatten comma-joined asset specs, trimming and dropping empties.

    `"a.zip, b.zip"` and `["a.zip", "b.zip"]` normalize identically.
    """
    if not assets:
        return []
    items = [assets] if isinstance(assets, str) else list(assets)
    return [part.strip() for item in items for part in item.split(",") if part.strip()]


def expand_assets(patterns: list[str]) -> list[Path]:
    """Expand glob patterns; a pattern matching no file is kept as a literal path."""
    out: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        matches = [Path(m) for m in sorted(glob.glob(pattern, recursive=True))]
        files = [m for m in matches if m.is_file()]
        for path in files or [Path(pattern)]:
            if path not in seen:
                seen.add(path)
                out.append(path)
    return out


def upload_each(
    paths: list[Path],
    upload_one: UploadOne,
    *,
    console: ConsoleProtocol,
    max_workers: int = 1,
) -> AssetReport:
    """Upload every path; results keep the input order."""

    def _upload(path: Path) -> UploadedAsset | AssetFailure:
        resolved = path.resolve()
        try:
            data = resolved.read_bytes()
        except OSError as e:
            console.error(f"Failed to read file {resolved}: {e}")
            return AssetFailure(path=resolved, message=str(e))

        name = resolved.name
        console.info(f"Uploading {name}...")
        result = upload_one(name, data)
        if isinstance(result, Err):
            console.error(f"Failed to upload {name}: {result.error}")
            return AssetFailure(path=resolved, message=str(result.error))

        console.success(f"Uploaded {name}")
        return UploadedAsset(name=name, path=resolved, url=result.value)

    if max_workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(paths))) as pool:
            outcomes = list(pool.map(_upload, paths))
    else:
        outcomes = [_upload(p) for p in paths]

    return AssetReport(
        uploaded=tuple(o for o in outcomes if isinstance(o, UploadedAsset)),
        failed=tuple(o for o in outcomes if isinstance(o, AssetFailure)),
    )


def fail_all(paths: list[Path], message: str) -> AssetReport:
    """Report every path as failed, when the upload target itself is unavailable."""
    return AssetReport(failed=tuple(AssetFailure(path=p, message=message) for p in paths))
