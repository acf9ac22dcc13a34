"""
Utility functions
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from typeguard import typechecked


@typechecked
def find_column(
    names: str | tuple[str, ...],
    columns: list[str],
    required: bool = True,
) -> str | None:
    """Find a column by one of its accepted names, ignoring case.

    Parameters
    ----------
    names : str or tuple of str
        The accepted names, in order of preference.
    columns : list[str]
        The list of column names to search within.
    required : bool, optional
        Raise an error if none of the names are found?

    Returns
    -------
    str or None
        The matching column name, as it is spelled in `columns`.

    Raises
    ------
    ValueError
        If the column is required and not found, or if a name matches more
        than one column.
    """
    for name in tuplize(names):
        found = [c for c in columns if c.lower() == name.lower()]
        if len(found) > 1:
            raise ValueError(
                f"The column '{name}' should be unique. Found {found}."
            )

        if found:
            return found[0]

    if required:
        raise ValueError(
            f"The column '{tuplize(names)[0]}' was not found. "
            f"Found columns: {columns}"
        )

    return None


def make_bool_target(target_column: pd.Series) -> pd.Series:
    """Convert a label column to boolean if possible.

    1. If its a bool column, keep it.
    2. If its an integer column, 1 becomes True and any other value
       (0, -1, ...) becomes False.
    """
    if target_column.dtype == bool:
        return target_column

    if target_column.dtype == object:
        try:
            target_column = target_column.astype(int)
        except (TypeError, ValueError) as e:
            raise ValueError(
                "The label column is not convertible to integers."
            ) from e

    if not pd.api.types.is_numeric_dtype(target_column) or (
        (target_column % 1) != 0
    ).any():
        raise ValueError(
            "The label column has values that are not boolean or integers. "
            f"Please check and fix. (found {target_column.unique().tolist()})"
        )

    return target_column == 1


def safe_divide(numerator, denominator, ones=False):
    """Divide ignoring div by zero warnings"""
    numerator = np.asarray(numerator, dtype=float)
    denominator = np.asarray(denominator, dtype=float)
    if ones:
        out = np.ones_like(numerator)
    else:
        out = np.zeros_like(numerator)

    return np.divide(numerator, denominator, out=out, where=(denominator != 0))


def tuplize(obj) -> tuple:
    """Convert obj to a tuple, without splitting strings"""
    try:
        _ = iter(obj)
    except TypeError:
        obj = (obj,)
    else:
        if isinstance(obj, str):
            obj = (obj,)

    return tuple(obj)
