"""eda package

Exploratory views of a joined multi-wave table: long reshape, wave presence
counts and matplotlib/seaborn figures.
"""

__all__ = ["explore", "plots"]
