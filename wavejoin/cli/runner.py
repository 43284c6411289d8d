#!/usr/bin/env python3
"""Command line runner for wave joins.

Subcommands:
  discover  list the wave files found under a root directory
  join      join the waves on the respondent id and write a tab-delimited table
  plot      draw exploratory figures from a joined table

Exit codes: 0 ok, 2 usage error, 3 input/validation error, 1 unexpected error.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
import traceback
from pathlib import Path

from wavejoin.config import DUPLICATE_POLICIES, JOIN_TYPES, JoinCfg

EXIT_INPUT = 3


def _configure_logging() -> None:
    # honor WAVEJOIN_LOG_LEVEL once; default INFO
    lvl_name = os.getenv("WAVEJOIN_LOG_LEVEL", "INFO")
    lvl = getattr(logging, lvl_name.upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(level=lvl, format="%(levelname)s %(name)s: %(message)s")


def _add_discovery_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--root", required=True, help="Directory searched recursively for wave files")
    p.add_argument("--pattern", default="indresp", help="Substring in every wave file name (default: indresp)")
    p.add_argument("--include", default="us", help="Substring the path must contain; '' disables (default: us)")
    p.add_argument("--waves", type=int, default=7, help="Number of expected waves (default: 7)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wavejoin")
    sub = parser.add_subparsers(dest="cmd")

    p_disc = sub.add_parser("discover", help="List wave files in wave order")
    _add_discovery_args(p_disc)

    p_join = sub.add_parser("join", help="Join wave files on the respondent id")
    _add_discovery_args(p_join)
    p_join.add_argument("--vars", nargs="+", required=True, help="Base variable names, e.g. sex dvage vote6")
    p_join.add_argument("--id", dest="id_col", default="pidp", help="Id column (default: pidp)")
    p_join.add_argument("--how", choices=JOIN_TYPES, default="outer", help="Join type (default: outer)")
    p_join.add_argument("--on-duplicate", dest="on_duplicate", choices=DUPLICATE_POLICIES, default="error")
    p_join.add_argument("--out", required=True, help="Output tab-delimited file")
    p_join.add_argument("--mkdir", action="store_true", help="Create the output directory if missing")
    p_join.add_argument("--dry-run", type=int, default=0, help="If 1 do a dry-run (no writes)")

    p_plot = sub.add_parser("plot", help="Exploratory figures from a joined table")
    p_plot.add_argument("--joined", required=True, help="Joined table written by 'join'")
    p_plot.add_argument("--vars", nargs="*", default=None, help="Base variables to plot (default: all)")
    p_plot.add_argument("--id", dest="id_col", default="pidp")
    p_plot.add_argument("--waves", type=int, default=7)
    p_plot.add_argument("--hue", default=None, help="Grouping variable for mean-by-wave lines, e.g. sex")
    p_plot.add_argument("--keep-missing-codes", action="store_true", help="Do not recode negative values to missing")
    p_plot.add_argument("--outdir", required=True)
    return parser


def cmd_discover(args) -> int:
    from wavejoin.common.discovery import discover_wave_files

    waves = discover_wave_files(args.root, args.pattern, args.include, args.waves)
    print(f"INFO: discovered {len(waves)} wave file(s) under {args.root}")
    for w in waves:
        print(f" - wave {w.wave} ({w.letter}): {w.path}")
    return 0


def cmd_join(args) -> int:
    from wavejoin.join.accumulate import join_run

    cfg = JoinCfg(
        root=Path(args.root),
        pattern=args.pattern,
        include=args.include,
        n_waves=args.waves,
        id_col=args.id_col,
        variables=list(args.vars),
        how=args.how,
        on_duplicate=args.on_duplicate,
    )
    result = join_run(cfg, args.out, mkdir=args.mkdir, dry_run=bool(args.dry_run))
    print(f"INFO: joined {len(result.waves)} wave(s): {len(result.df)} rows x {len(result.df.columns)} cols -> {args.out}")
    return 0


def cmd_plot(args) -> int:
    from wavejoin.common.io import read_joined
    from wavejoin.eda.explore import infer_variables, recode_missing, to_long
    from wavejoin.eda import plots

    df = read_joined(args.joined)
    if args.id_col not in df.columns:
        raise KeyError(f"id column '{args.id_col}' not in {args.joined}")
    if not args.keep_missing_codes:
        df = recode_missing(df, columns=[c for c in df.columns if c != args.id_col])
    variables = args.vars or infer_variables(df, args.id_col)
    if args.hue and args.hue not in variables:
        variables = variables + [args.hue]
    long_df = to_long(df, args.id_col, variables, args.waves)

    outdir = Path(args.outdir)
    written = [plots.plot_wave_presence(df, outdir, id_col=args.id_col, n_waves=args.waves)]
    for v in variables:
        if long_df[v].notna().sum() == 0:
            print(f"WARNING: no values for '{v}'; skipped", file=sys.stderr)
            continue
        written.append(plots.plot_distribution_by_wave(long_df, v, outdir))
        if v != args.hue and (args.hue or not plots.is_categorical(long_df[v])):
            written.append(plots.plot_mean_by_wave(long_df, v, outdir, hue=args.hue))
    print(f"INFO: {len(written)} figure(s) -> {outdir}")
    return 0


COMMANDS = {"discover": cmd_discover, "join": cmd_join, "plot": cmd_plot}


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    _configure_logging()

    parser = build_parser()
    args = parser.parse_args(argv)
    handler = COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return 2

    from wavejoin.errors import AccumulationError, WaveDiscoveryError, WaveReadError

    try:
        return handler(args)
    except (WaveDiscoveryError, WaveReadError, AccumulationError, FileNotFoundError,
            PermissionError, NotADirectoryError, KeyError, ValueError) as e:
        logging.getLogger("wavejoin.cli").error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT
    except Exception:
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
