"""join package

Folds per-wave survey tables into one wide table keyed by respondent id.

Default input: one ``<letter>_indresp`` file per wave.
Default output: a tab-delimited joined table plus ``<output>.manifest.json``.
"""
from wavejoin.join.accumulate import JoinResult, join_run, join_waves  # noqa: F401

__all__ = ["JoinResult", "join_run", "join_waves"]
