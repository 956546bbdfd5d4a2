"""
keyword_graph: Embedding → mean-centering → SVD → 2-D projection pipeline for word maps.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .csv_writer import read_table, render_table, write_table
from .embedder import EmbeddingSource, build_source, embed_labels
from .errors import (
    ConfigurationError,
    DimensionError,
    DimensionMismatchError,
    KeywordGraphError,
    ProviderError,
)
from .pca_reducer import N_COMPONENTS, FittedProjection, reduce_pca
from .samples import ResultRow, Sample, SampleTable, build_table

__all__ = [
    "ConfigurationError",
    "DimensionError",
    "DimensionMismatchError",
    "EmbeddingSource",
    "FittedProjection",
    "KeywordGraphError",
    "ProviderError",
    "ResultRow",
    "Sample",
    "SampleTable",
    "build_source",
    "build_table",
    "embed_labels",
    "project_table",
    "read_table",
    "reduce_pca",
    "render_table",
    "run_pipeline",
    "write_table",
]

LOG = logging.getLogger(__name__)


def project_table(
    table: SampleTable,
    *,
    svd_solver: str = "full",
    random_state: int | None = None,
    iterated_power: int = 4,
) -> tuple[list[ResultRow], FittedProjection | None]:
    """
    Project a SampleTable onto its first two principal directions.

    Returns:
        (rows, fitted). For an empty table rows is [] and fitted is None; no
        computation is attempted.
    """
    if table.n == 0:
        return [], None
    Z, fitted = reduce_pca(
        table.matrix(),
        k=N_COMPONENTS,
        random_state=random_state,
        svd_solver=svd_solver,
        iterated_power=iterated_power,
    )
    LOG.info(
        "Projected %d x %d onto %d components (explained variance %s)",
        table.n,
        table.d,
        N_COMPONENTS,
        ", ".join(f"{r:.3f}" for r in fitted.explained_variance_ratio),
    )
    rows = [
        ResultRow(label=label, x=float(Z[i, 0]), y=float(Z[i, 1]))
        for i, label in enumerate(table.labels)
    ]
    return rows, fitted


def run_pipeline(
    labels: Sequence[str],
    source: EmbeddingSource,
    *,
    output_path: str | None = None,
    svd_solver: str = "full",
    random_state: int | None = None,
    iterated_power: int = 4,
) -> tuple[list[ResultRow], FittedProjection | None]:
    """
    Run the full pipeline: embed labels → center → SVD → project to 2-D → write `title,x,y`.

    Args:
        labels: Labels to embed, in output order.
        source: Any EmbeddingSource (see embedder.build_source()).
        output_path: Where to write the table; None skips writing, "-" writes to stdout.
        svd_solver: 'full' (exact, default) or 'randomized'.
        random_state: Seed for the randomized solver.
        iterated_power: Power iterations for the randomized solver.

    Returns:
        (rows, fitted) where rows are in label order and fitted is the FittedProjection
        (None when there were no labels, in which case nothing is written).

    Raises:
        ProviderError: If any label cannot be embedded; nothing is written.
        DimensionMismatchError: If the vectors do not share one length.
        DimensionError: If the vectors have fewer than two dimensions.
    """
    table = embed_labels(list(labels), source)
    rows, fitted = project_table(
        table,
        svd_solver=svd_solver,
        random_state=random_state,
        iterated_power=iterated_power,
    )
    if output_path is not None:
        write_table(rows, output_path)
    elif not rows:
        LOG.info("No vectors to project.")
    return rows, fitted
