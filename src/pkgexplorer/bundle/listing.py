"""Tabular view of package contents (pandas)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from pkgexplorer.core.content import ContentHandle, read_bytes

from .manifest import sha256_bytes

if TYPE_CHECKING:  # pragma: no cover
    import pandas as pd


FILES_TABLE_COLUMNS = ["path", "folder", "name", "size", "sha256"]


def files_table(entries: Iterable[tuple[str, ContentHandle]]) -> "pd.DataFrame":
    """Return one row per file, in the order given (tree traversal order)."""
    import pandas as pd  # local import to keep module import-light

    rows = []
    for path, content in entries:
        data = read_bytes(content)
        folder, _, name = path.rpartition("/")
        rows.append(
            {
                "path": path,
                "folder": folder,
                "name": name,
                "size": len(data),
                "sha256": sha256_bytes(data),
            }
        )
    df = pd.DataFrame(rows, columns=FILES_TABLE_COLUMNS)
    return df.astype({"size": "int64"})


def write_files_table_csv(df: "pd.DataFrame", path: str | Path) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.loc[:, FILES_TABLE_COLUMNS].to_csv(out, index=False, lineterminator="\n")
