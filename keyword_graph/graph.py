"""
Matplotlib graph: labeled scatter of the projected 2-D coordinates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .samples import ResultRow

LOG = logging.getLogger(__name__)


def plot_rows(
    rows: Sequence[ResultRow],
    path: str | Path,
    title: str = "Embedding projection (PC1 / PC2)",
    explained_variance_ratio: Optional[Sequence[float]] = None,
) -> bool:
    """Draw the rows as an annotated scatter and save as PNG.

    Returns False (and writes nothing) when there are no rows.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if not rows:
        LOG.info("No rows to plot.")
        return False

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    xs = [r.x for r in rows]
    ys = [r.y for r in rows]

    fig, ax = plt.subplots(figsize=(8, 7))
    ax.scatter(xs, ys, s=36, color="C0")
    for r in rows:
        ax.annotate(r.label, (r.x, r.y), textcoords="offset points", xytext=(5, 5), fontsize=9)

    if explained_variance_ratio is not None and len(explained_variance_ratio) >= 2:
        ax.set_xlabel(f"PC1 ({explained_variance_ratio[0]:.1%})")
        ax.set_ylabel(f"PC2 ({explained_variance_ratio[1]:.1%})")
    else:
        ax.set_xlabel("PC1")
        ax.set_ylabel("PC2")
    ax.set_title(title)
    ax.axhline(0.0, color="0.8", linewidth=0.8, zorder=0)
    ax.axvline(0.0, color="0.8", linewidth=0.8, zorder=0)
    ax.grid(True, alpha=0.3)

    fig.savefig(str(out), dpi=120, bbox_inches="tight")
    plt.close(fig)
    LOG.info("Plot written: %s", out)
    return True
