import warnings
import numbers
import pandas
from multiprocessing import Pool
from ._utils import _get_water_year, _check_columns, _check_sorted
from .errors import ConfigurationError, EmptySeriesError
from .rain import Rain


def get_year_start(monthly: pandas.DataFrame) -> int:
    """
    find the month when the water year starts: the calendar month with the highest long-term average rainfall.
    if the highest average occurs more than once, the month of the earliest date wins.

    Args:
        monthly: monthly series of the reference location, with columns `date` and `average`

    Returns:
        month (1 - 12)
    """
    _check_columns(monthly, ["date", "average"])
    data = monthly.dropna(subset=["average"]).sort_values("date", kind="stable")
    if data.empty:
        raise EmptySeriesError("no long-term average rainfall to find the start of water year from")

    by_month = data.groupby(data["date"].dt.month)["average"].max()
    wettest = data[data["average"] == by_month.max()]
    return int(wettest["date"].iloc[0].month)


class WaterYearAligner:
    def __init__(self, year_start: int):
        """
        Tags series with water years that begin in `year_start`.

        Args:
            year_start: the month when the water year starts
        """
        if isinstance(year_start, bool) or not isinstance(year_start, numbers.Integral) or not 1 <= year_start <= 12:
            raise ConfigurationError("'year_start' should be a whole month between 1 and 12")
        self._year_start = int(year_start)

    @property
    def year_start(self) -> int:
        """the month when the water year begins"""
        return self._year_start

    @classmethod
    def from_climatology(cls, monthly: pandas.DataFrame) -> "WaterYearAligner":
        """create aligner with water year starting in the wettest month of `monthly`. see `get_year_start`"""
        return cls(get_year_start(monthly))

    def align(self, data: pandas.DataFrame) -> Rain:
        """
        add `water_year` and `cumulative` (observed rainfall accumulated since the start of the water year) columns.

        Args:
            data: series with columns `date` and `value`, sorted by date

        Returns:
            [`Rain`](./rain.html)
        """
        _check_columns(data, ["date", "value"])
        if data.empty:
            raise EmptySeriesError("can not align an empty series")
        _check_sorted(data["date"])

        aligned = data.copy()
        if aligned["value"].isna().any():
            warnings.warn("NA values in rainfall were filled with zero")
            aligned["value"] = aligned["value"].fillna(0)

        aligned["water_year"] = _get_water_year(aligned["date"], self.year_start)
        aligned["cumulative"] = aligned.groupby("water_year", sort=False)["value"].cumsum()
        return Rain(aligned.reset_index(drop=True), self.year_start)

    def align_many(self, series: dict, n_cores: int = 1) -> dict:
        """
        align several series, e.g. `Records.series`. empty series are skipped.

        Args:
            series: `dict` of series
            n_cores: number of cores to use in parallel, if available

        Returns:
            `dict` of [`Rain`](./rain.html) with the same keys
        """
        n_cores = int(max(1, n_cores))
        series = {key: data for key, data in series.items() if not data.empty}

        if n_cores > 1:
            with Pool(n_cores) as pool:
                container = {key: pool.apply_async(self.align, (data,)) for key, data in series.items()}
                return {key: res.get() for key, res in container.items()}
        return {key: self.align(data) for key, data in series.items()}
