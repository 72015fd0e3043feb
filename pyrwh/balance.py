import numpy
import pandas
import pdrle
import toml
from pathlib import Path
from typing import Union
from ._utils import _check_columns, _check_sorted
from .config import BalanceConfig
from .errors import EmptySeriesError

SCENARIOS = ["balance", "overflow", "deficit"]


class Balance:
    """Result of the monthly balance simulation of a tank."""

    def __init__(self,
                 data: pandas.DataFrame,
                 config: BalanceConfig):
        self.data = data
        """
        `DataFrame` with one row per month: `date`, `water_year`, `inflow`, `outflow`, `unrestrained_balance`,
        `balance`, `overflow`, `deficit` (all m³), and `scenario`
        """

        self.config = config
        """parameters used for the simulation"""

        self.probabilities = get_probabilities(data)
        """probability of each scenario by calendar month"""

    @property
    def reliability(self) -> float:
        """share of months in which demand was fully met"""
        return float(self.data["scenario"].ne("deficit").mean())

    def get_summary(self) -> pandas.DataFrame:
        """
        total inflow, outflow, overflow, and deficit in each water year, plus the balance at the end of the year
        """
        summary = self.data.groupby("water_year").agg(inflow=("inflow", "sum"),
                                                      outflow=("outflow", "sum"),
                                                      overflow=("overflow", "sum"),
                                                      deficit=("deficit", "sum"),
                                                      end_balance=("balance", "last"),
                                                      months=("date", "count"))
        return summary

    def get_deficit_spells(self) -> pandas.DataFrame:
        """
        runs of consecutive months in deficit

        Returns:
            `DataFrame` with columns `start`, `end`, `months`, and `deficit` (total m³ missing during the spell)
        """
        is_deficit = self.data["scenario"].eq("deficit")
        spell_id = pdrle.get_id(is_deficit)
        spells = self.data[is_deficit].groupby(spell_id[is_deficit]).agg(start=("date", "min"),
                                                                         end=("date", "max"),
                                                                         months=("date", "count"),
                                                                         deficit=("deficit", "sum"))
        return spells.reset_index(drop=True)

    def save(self,
             root: Union[str, Path],
             prefix: str = "",
             save_info: bool = True,
             n_digits: int = 3):
        """
        Save simulation results locally

        Args:
            root: the directory where the results should be saved
            prefix: the prefix that will be added to the file names
            save_info: if `False`, only the monthly records and probabilities will be saved
            n_digits: volumes will be rounded to this many decimal places
        """
        root = Path(root)
        self.data.round(n_digits).to_csv(root / "{prefix}_balance.csv".format(prefix=prefix), index=False)
        self.probabilities.round(n_digits).to_csv(root / "{prefix}_probabilities.csv".format(prefix=prefix))
        if save_info:
            info = self.config.to_dict()
            info["reliability"] = round(self.reliability, n_digits)
            with open(root / "{prefix}_balance_info.toml".format(prefix=prefix), "w") as f:
                toml.dump(info, f)


def get_probabilities(data: pandas.DataFrame) -> pandas.DataFrame:
    """
    count scenarios in each calendar month across water years

    Args:
        data: monthly records with columns `date` and `scenario`

    Returns:
        `DataFrame` indexed by month (1 - 12) with columns `n_of_<scenario>`, `n_years`, and `p_of_<scenario>`
    """
    counts = pandas.crosstab(data["date"].dt.month, data["scenario"])
    counts = counts.reindex(columns=SCENARIOS, fill_value=0)
    counts.index.name = "month"
    counts.columns.name = None

    n_years = counts.sum(axis=1)
    probabilities = counts.div(n_years, axis=0)

    counts.columns = [f"n_of_{nm}" for nm in SCENARIOS]
    probabilities.columns = [f"p_of_{nm}" for nm in SCENARIOS]
    return pandas.concat([counts, n_years.rename("n_years"), probabilities], axis=1)


def simulate_balance(data: pandas.DataFrame, config: BalanceConfig) -> Balance:
    """
    run the monthly balance of a tank of capacity `config.storage` fed by `config.area` m² of capture area.

    the tank starts empty. each month gains `value * 0.001 * area * efficiency` m³ and loses `demand / 12` m³. the
    unrestrained balance above capacity overflows, below zero is a deficit.

    Args:
        data: aligned monthly series with columns `date`, `water_year`, and `value` (mm), sorted by date
        config: simulation parameters

    Returns:
        [`Balance`](#Balance)
    """
    _check_columns(data, ["date", "water_year", "value"])
    _check_sorted(data["date"])

    if config.start_date is not None:
        data = data[data["date"] >= config.start_date]
    if data.empty:
        raise EmptySeriesError("no months to simulate")

    inflow = data["value"].fillna(0).to_numpy() * 0.001 * config.area * config.efficiency
    outflow = numpy.full(inflow.shape, config.demand / 12)

    unrestrained = numpy.zeros(inflow.shape)
    balance = numpy.zeros(inflow.shape)
    previous = 0.0
    for i in range(inflow.size):
        unrestrained[i] = previous + inflow[i] - outflow[i]
        balance[i] = min(max(unrestrained[i], 0.0), config.storage)
        previous = balance[i]

    records = pandas.DataFrame({"date": data["date"].to_numpy(),
                                "water_year": data["water_year"].to_numpy(),
                                "inflow": inflow,
                                "outflow": outflow,
                                "unrestrained_balance": unrestrained,
                                "balance": balance,
                                "overflow": numpy.maximum(unrestrained - config.storage, 0),
                                "deficit": numpy.maximum(-unrestrained, 0)})
    records["scenario"] = numpy.select([unrestrained > config.storage, unrestrained < 0],
                                       ["overflow", "deficit"],
                                       default="balance")
    return Balance(records, config)
