import warnings
import pandas
import toml
from pathlib import Path
from typing import Union
from ._utils import _check_columns, _check_sorted
from .config import CapacityConfig
from .errors import ConfigurationError, EmptySeriesError


class BaseCase:
    def __init__(self,
                 data: pandas.DataFrame,
                 totals: pandas.Series,
                 base_threshold: float,
                 base_year: int,
                 required_capture_area: float,
                 config: CapacityConfig):
        """
        Storage capacity needed to meet a fixed demand in the base year.

        Args:
            data: monthly records of the base year with columns `capture`, `need`, `supply`, `demand`, and `diff`
            totals: total rainfall of each water year (mm)
            base_threshold: design rainfall, the quantile of `totals` at the exceedance probability (mm)
            base_year: water year picked as the design reference
            required_capture_area: capture area needed to collect the yearly demand at `base_threshold` (m²)
            config: sizing parameters
        """
        self.data = data
        self.totals = totals
        self.base_threshold = base_threshold
        self.base_year = base_year
        self.required_capture_area = required_capture_area
        self.config = config

        self.base_year_total = float(totals[base_year])
        """total rainfall of the base year (mm)"""

        critical = data["diff"].idxmax()
        self.required_storage = float(data.loc[critical, "diff"])
        """largest surplus of cumulative supply over cumulative demand in the base year (m³)"""

        self.critical_month = data.loc[critical, "date"]
        """date when `required_storage` is reached"""

    def save(self,
             root: Union[str, Path],
             prefix: str = "",
             save_info: bool = True,
             n_digits: int = 3):
        """
        Save base case locally

        Args:
            root: the directory where the base case should be saved
            prefix: the prefix that will be added to the file names
            save_info: if `False`, only the monthly records will be saved
            n_digits: values will be rounded to this many decimal places
        """
        root = Path(root)
        self.data.round(n_digits).to_csv(root / "{prefix}_base_case.csv".format(prefix=prefix), index=False)
        if save_info:
            info = self.config.to_dict()
            info.update({"base_year": int(self.base_year),
                         "base_year_total": round(self.base_year_total, n_digits),
                         "base_threshold": round(self.base_threshold, n_digits),
                         "required_capture_area": round(self.required_capture_area, n_digits),
                         "required_storage": round(self.required_storage, n_digits),
                         "critical_month": self.critical_month.strftime("%Y-%m-%d")})
            with open(root / "{prefix}_base_case_info.toml".format(prefix=prefix), "w") as f:
                toml.dump(info, f)


def get_totals(data: pandas.DataFrame) -> pandas.Series:
    """total rainfall reached in each water year - the highest cumulative rainfall"""
    return data.groupby("water_year")["cumulative"].max()


def find_base_year(totals: pandas.Series, exceedance_probability: float) -> tuple[int, float]:
    """
    pick the driest water year that still meets the design rainfall

    Args:
        totals: total rainfall of each water year
        exceedance_probability: quantile of `totals` used as design rainfall

    Returns:
        base year and the design rainfall (`base_threshold`)
    """
    base_threshold = float(totals.quantile(exceedance_probability))
    qualifying = totals[totals >= base_threshold]
    if qualifying.empty or not base_threshold > 0:
        raise ConfigurationError(f"no water year qualifies for design rainfall of {base_threshold} mm")

    base_year = qualifying[qualifying == qualifying.min()].index.min()
    return base_year, base_threshold


def size_capacity(data: pandas.DataFrame, config: CapacityConfig) -> BaseCase:
    """
    find the capture area and storage needed to meet `config.demand` in the base year.

    the capture area collects exactly the yearly demand at design rainfall. replaying the base year with that area,
    the storage has to hold the largest surplus of cumulative capture over cumulative demand.

    Args:
        data: aligned monthly series with columns `date`, `water_year`, `value`, and `cumulative`, sorted by date
        config: sizing parameters

    Returns:
        [`BaseCase`](#BaseCase)
    """
    _check_columns(data, ["date", "water_year", "value", "cumulative"])
    if data.empty:
        raise EmptySeriesError("no months to size the storage from")
    _check_sorted(data["date"])

    totals = get_totals(data)
    base_year, base_threshold = find_base_year(totals, config.exceedance_probability)
    area = config.demand / (config.efficiency * base_threshold * 0.001)

    base = data.loc[data["water_year"] == base_year, ["date", "water_year", "value", "cumulative"]]
    base = base.reset_index(drop=True)
    if len(base) < 12:
        warnings.warn(f"base year {base_year} has only {len(base)} months of data")

    base["capture"] = base["value"] * 0.001 * area * config.efficiency
    base["need"] = config.demand / 12
    base["supply"] = base["capture"].cumsum()
    base["demand"] = base["need"].cumsum()
    base["diff"] = base["supply"] - base["demand"]

    return BaseCase(base, totals, base_threshold, base_year, area, config)
