import pandas
from typing import Iterable
from .errors import DataShapeError


def _get_water_year(dates: pandas.Series, year_start: int) -> pandas.Series:
    """

    :param dates: datetime series
    :param year_start: month when the water year starts
    :return: water year of each date. months before `year_start` belong to the previous year
    """
    return dates.dt.year.where(dates.dt.month >= year_start, dates.dt.year - 1)


def _calc_exceedance(totals: pandas.Series) -> pandas.DataFrame:
    """
    Calculate empirical probability of water-year totals being equalled or exceeded, `count / (n + 1)` where `count`
    is the number of water years with at least that total

    :param totals: total rainfall of each water year, indexed by water year
    :return: dataframe with columns `val`, `water_year` (earliest year with that total), `count`, and `prob`
    """
    exceedance = pandas.DataFrame({"val": totals.to_numpy(),
                                   "water_year": totals.index.to_numpy(),
                                   "count": totals.rank(method="max", ascending=False).to_numpy().astype(int)})
    exceedance = exceedance.sort_values(["val", "water_year"], ascending=[False, True]).drop_duplicates("val")
    exceedance["prob"] = exceedance["count"].div(len(totals) + 1)
    return exceedance.reset_index(drop=True)


def _check_columns(data: pandas.DataFrame, columns: Iterable[str]) -> None:
    missing = [nm for nm in columns if nm not in data.columns]
    if missing:
        raise DataShapeError(f"missing columns: {missing}")


def _check_sorted(dates: pandas.Series) -> None:
    """dates must be strictly increasing"""
    if not dates.is_monotonic_increasing:
        raise DataShapeError("dates should be sorted in ascending order")
    if dates.duplicated().any():
        raise DataShapeError("dates should be unique")
