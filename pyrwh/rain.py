import pandas
from scipy import interpolate
from typing import Union, Callable
from ._utils import _calc_exceedance
from .balance import Balance, simulate_balance
from .capacity import BaseCase, size_capacity, get_totals
from .config import BalanceConfig, CapacityConfig


class Rain:
    """
    class that holds a rainfall series aligned to water years and provides the balance simulation and capacity sizing
    over it. created by [`WaterYearAligner.align`](./water_year.html).
    """

    def __init__(self,
                 data: pandas.DataFrame,
                 year_start: int):
        self.data = data
        """
        `DataFrame` with columns `date`, `value`, `average`, `anomaly`, `water_year`, and `cumulative`. rows are sorted by
        date
        """

        self.year_start = year_start
        """the month when the water year begins"""

        self.totals = get_totals(self.data)
        """the total rainfall in each water-year"""

    def get_exceedance(self,
                       probs: list[float] = None,
                       n_digits: int = 2) -> Union[pandas.DataFrame, pandas.Series]:
        """
        calculate probability of water-year totals being equalled or exceeded.

        Args:
            probs: optional parameter indicating the exceedance probabilities for which corresponding rainfall
                totals will be interpolated and returned.
            n_digits: totals will be rounded to this many decimal places

        Returns:
            if `probs` is provided, a `Series` where the `index` is `probs`. otherwise a `DataFrame` with columns `val`,
                `water_year` (earliest water year with that total), and `prob`, wettest first
        """
        ex = _calc_exceedance(self.totals.round(n_digits))

        if probs is None:
            return ex[["val", "water_year", "prob"]]

        interpolate_vals = interpolate.interp1d(ex.prob, ex.val, bounds_error=False)
        return pandas.Series(interpolate_vals(probs), index=probs, name="val")

    def get_summary(self,
                    funcs: Union[str, list[str], Callable, list[Callable]] = "sum",
                    by: str = "month") -> pandas.DataFrame:
        """
        summarize observed rainfall

        Args:
            funcs: the functions to use for summarizing. default is `sum`. can also be a list of functions.
            by: `month` to summarize by calendar month (1 - 12) across water years, `water_year` to summarize each
                water year

        Returns:
            `Dataframe`: summary data
        """
        if not isinstance(funcs, list):
            funcs = [funcs]

        assert by in ["month", "water_year"], "'by' should be 'month' or 'water_year'"
        keys = self.data["date"].dt.month.rename("month") if by == "month" else self.data["water_year"]
        return self.data.groupby(keys)["value"].agg(funcs)

    def simulate_balance(self, config: BalanceConfig) -> Balance:
        """
        simulate the monthly balance of a tank. see [`simulate_balance`](./balance.html#simulate_balance)

        Args:
            config: simulation parameters

        Returns:
            [`Balance`](./balance.html#Balance)
        """
        return simulate_balance(self.data, config)

    def size_capacity(self, config: CapacityConfig) -> BaseCase:
        """
        find capture area and storage for a fixed demand. see [`size_capacity`](./capacity.html#size_capacity)

        Args:
            config: sizing parameters

        Returns:
            [`BaseCase`](./capacity.html#BaseCase)
        """
        return size_capacity(self.data, config)
