"""
CLI for keyword_graph: project, embed, reduce, and plot subcommands.
Run with: python3 -m keyword_graph <subcommand> ...
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import KeywordGraphError

LOG = logging.getLogger(__name__)


def _read_labels(path: Path) -> list[str]:
    """One label per line from a file, or stdin for "-". Labels are kept verbatim; blank lines are skipped."""
    if str(path) == "-":
        lines = sys.stdin.read().splitlines()
    else:
        lines = path.read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line.strip()]


def _load_cfg(args: argparse.Namespace):
    from .config import config_from_env, validate_config
    from .kconfig_loader import load_config

    if getattr(args, "config", None) is not None:
        try:
            cfg = load_config(str(args.config), validate=False)
        except FileNotFoundError as e:
            raise SystemExit(str(e))
    else:
        cfg = config_from_env()

    if getattr(args, "input", None) is not None:
        cfg.labels = _read_labels(args.input)
    for name in ("provider", "dimensions", "embedding_model", "svd_solver", "random_state", "iterated_power"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(cfg, name, value)
    for name in ("basis_out", "plot_out"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(cfg, name, str(value))
    if getattr(args, "output", None) is not None:
        cfg.output_path = str(args.output)

    validate_config(cfg)
    return cfg


def _save_outputs(rows, fitted, basis_out: str, plot_out: str) -> None:
    if fitted is not None and basis_out:
        fitted.save(basis_out)
        LOG.info("Saved fitted projection to %s", basis_out)
    if rows and plot_out:
        from .graph import plot_rows
        plot_rows(rows, plot_out, explained_variance_ratio=fitted.explained_variance_ratio)


def cmd_project(args: argparse.Namespace) -> None:
    from . import run_pipeline
    from .embedder import build_source

    cfg = _load_cfg(args)
    source = build_source(cfg)
    rows, fitted = run_pipeline(
        cfg.labels,
        source,
        output_path=cfg.output_path,
        svd_solver=cfg.svd_solver,
        random_state=cfg.random_state,
        iterated_power=cfg.iterated_power,
    )
    _save_outputs(rows, fitted, cfg.basis_out, cfg.plot_out)


def cmd_embed(args: argparse.Namespace) -> None:
    import numpy as np
    from .embedder import build_source, embed_labels

    cfg = _load_cfg(args)
    table = embed_labels(cfg.labels, build_source(cfg))
    if table.n == 0:
        LOG.info("No labels to embed.")
        return
    np.save(args.output, table.matrix())
    LOG.info("Saved %d x %d embedding matrix to %s", table.n, table.d, args.output)


def cmd_reduce(args: argparse.Namespace) -> None:
    import numpy as np
    from . import project_table
    from .csv_writer import write_table
    from .samples import table_from_matrix

    labels = _read_labels(args.labels)
    X = np.load(args.input)
    try:
        table = table_from_matrix(labels, X)
    except ValueError as e:
        raise SystemExit(str(e))
    rows, fitted = project_table(
        table,
        svd_solver=args.svd_solver,
        random_state=args.random_state,
        iterated_power=args.iterated_power,
    )
    write_table(rows, args.output)
    _save_outputs(
        rows,
        fitted,
        str(args.basis_out) if args.basis_out else "",
        str(args.plot_out) if args.plot_out else "",
    )


def cmd_plot(args: argparse.Namespace) -> None:
    from .csv_writer import read_table
    from .graph import plot_rows

    rows = read_table(args.input)
    plot_rows(rows, args.output, title=args.title)


def _add_provider_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Input file: one label per line, '-' for stdin (default: labels from --config)",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="kconfig-style .config file (default: AZURE_OPENAI_* / OPENAI_API_KEY environment)",
    )
    p.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=("azure", "openai", "sentence-transformers"),
        help="Embedding provider (default: azure)",
    )
    p.add_argument(
        "--dimensions",
        type=int,
        default=None,
        metavar="D",
        help="Embedding dimensions requested from OpenAI providers (default: 512)",
    )
    p.add_argument(
        "-m", "--model",
        dest="embedding_model",
        type=str,
        default=None,
        help="Sentence-transformers model name (default: all-MiniLM-L6-v2)",
    )


def _add_projection_args(p: argparse.ArgumentParser, defaults: bool) -> None:
    p.add_argument(
        "--svd-solver",
        type=str,
        default="full" if defaults else None,
        choices=("full", "randomized"),
        help="SVD solver (default: full, exact)",
    )
    p.add_argument(
        "--iterated-power",
        type=int,
        default=4 if defaults else None,
        metavar="N",
        help="Power iterations for randomized solver (default: 4)",
    )
    p.add_argument("--random-state", type=int, default=None, help="Random seed for randomized solver")
    p.add_argument(
        "--basis-out",
        type=Path,
        default=None,
        help="Optional: save fitted projection (joblib)",
    )
    p.add_argument(
        "--plot-out",
        type=Path,
        default=None,
        help="Optional: save a labeled scatter plot (PNG)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keyword_graph",
        description="Embed words, project them to 2-D with PCA (SVD), write a title,x,y table.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # project
    p_project = subparsers.add_parser("project", help="Run embed → center → SVD → 2-D table")
    _add_provider_args(p_project)
    p_project.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output table (title,x,y); '-' for stdout (default: embeddings.csv)",
    )
    _add_projection_args(p_project, defaults=False)
    p_project.set_defaults(func=cmd_project)

    # embed
    p_embed = subparsers.add_parser("embed", help="Embed labels to vectors")
    _add_provider_args(p_embed)
    p_embed.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output .npy file for embedding matrix",
    )
    p_embed.set_defaults(func=cmd_embed)

    # reduce
    p_reduce = subparsers.add_parser("reduce", help="Project a saved embedding matrix to a 2-D table")
    p_reduce.add_argument("input", type=Path, help="Input .npy embedding matrix")
    p_reduce.add_argument(
        "labels",
        type=Path,
        help="Labels file: one label per line, same order as the matrix rows",
    )
    p_reduce.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output table (title,x,y) (default: stdout)",
    )
    _add_projection_args(p_reduce, defaults=True)
    p_reduce.set_defaults(func=cmd_reduce)

    # plot
    p_plot = subparsers.add_parser("plot", help="Draw a title,x,y table as a labeled scatter")
    p_plot.add_argument("input", type=Path, help="Input table written by project/reduce")
    p_plot.add_argument("-o", "--output", type=Path, required=True, help="Output PNG")
    p_plot.add_argument(
        "--title",
        type=str,
        default="Embedding projection (PC1 / PC2)",
        help="Figure title",
    )
    p_plot.set_defaults(func=cmd_plot)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except KeywordGraphError as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
