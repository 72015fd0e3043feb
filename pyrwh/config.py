import pandas
import toml
from pathlib import Path
from typing import Union
from .errors import ConfigurationError


def _positive(name: str, value: float) -> float:
    value = float(value)
    if not 0 < value < float("inf"):
        raise ConfigurationError(f"'{name}' should be a finite number greater than 0")
    return value


def _efficiency(value: float) -> float:
    value = float(value)
    if not 0 < value <= 1:
        raise ConfigurationError("'efficiency' should be greater than 0 and at most 1")
    return value


class BalanceConfig:
    def __init__(self,
                 demand: float,
                 efficiency: float,
                 area: float,
                 storage: float,
                 start_date: Union[str, pandas.Timestamp] = None):
        """
        Parameters of the monthly balance simulation.

        Args:
            demand: water drawn from the tank in a year (m³). drawn uniformly, one twelfth each month
            efficiency: share of rainfall on the capture area that reaches the tank
            area: capture area (m²)
            storage: tank capacity (m³)
            start_date: months before this date are not simulated. default is the first month in the series
        """
        if not 0 <= float(demand) < float("inf"):
            raise ConfigurationError("'demand' should be a finite number, not negative")
        if not float(storage) >= 0:
            raise ConfigurationError("'storage' should be a number, not negative")

        self.demand = float(demand)
        self.efficiency = _efficiency(efficiency)
        self.area = _positive("area", area)
        self.storage = float(storage)
        self.start_date = None if start_date is None else pandas.Timestamp(start_date)

    def to_dict(self) -> dict:
        params = {"demand": self.demand, "efficiency": self.efficiency, "area": self.area, "storage": self.storage}
        if self.start_date is not None:
            params["start_date"] = self.start_date.strftime("%Y-%m-%d")
        return params


class CapacityConfig:
    def __init__(self,
                 demand: float,
                 efficiency: float,
                 exceedance_probability: float = 0.05):
        """
        Parameters of the storage capacity sizing.

        Args:
            demand: water needed in a year (m³)
            efficiency: share of rainfall on the capture area that reaches the tank
            exceedance_probability: quantile of the water-year totals used as design rainfall. default `0.05` picks a
                dry year
        """
        if not 0 < float(exceedance_probability) < 1:
            raise ConfigurationError("'exceedance_probability' should be between 0 and 1")

        self.demand = _positive("demand", demand)
        self.efficiency = _efficiency(efficiency)
        self.exceedance_probability = float(exceedance_probability)

    def to_dict(self) -> dict:
        return {"demand": self.demand,
                "efficiency": self.efficiency,
                "exceedance_probability": self.exceedance_probability}


_SECTIONS = {"balance": BalanceConfig, "capacity": CapacityConfig}


def load_config(path: Union[str, Path]) -> dict:
    """
    load simulation parameters from a toml file with optional tables `water_year` (key `start`), `balance`, and
    `capacity`.

    Args:
        path: path to the toml file

    Returns:
        `dict` with keys `year_start` (`int` or `None`), `balance` ([`BalanceConfig`](#BalanceConfig) or `None`), and
            `capacity` ([`CapacityConfig`](#CapacityConfig) or `None`)
    """
    info = toml.load(path)

    unknown = set(info) - set(_SECTIONS) - {"water_year"}
    if unknown:
        raise ConfigurationError(f"unknown tables in {path}: {sorted(unknown)}")

    config = {"year_start": info.get("water_year", {}).get("start")}
    for section, cls in _SECTIONS.items():
        if section not in info:
            config[section] = None
            continue
        try:
            config[section] = cls(**info[section])
        except TypeError as err:
            raise ConfigurationError(f"invalid keys in table '{section}': {err}") from err
    return config


def save_config(path: Union[str, Path],
                balance: BalanceConfig = None,
                capacity: CapacityConfig = None,
                year_start: int = None) -> None:
    """write simulation parameters to a toml file readable by `load_config`"""
    info = {}
    if year_start is not None:
        info["water_year"] = {"start": int(year_start)}
    if balance is not None:
        info["balance"] = balance.to_dict()
    if capacity is not None:
        info["capacity"] = capacity.to_dict()

    with open(path, "w") as f:
        toml.dump(info, f)
