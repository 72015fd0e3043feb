import re
import warnings
import pandas
from pandas.api import types
from typing import Union
from ._utils import _check_columns, _check_sorted
from .errors import DataShapeError, EmptySeriesError

WINDOWS = {"rf": "decadal", "r1": "monthly", "r3": "quarterly"}
"""column name prefix of each aggregation window"""

KINDS = {"h": "value", "h_avg": "average", "q": "anomaly"}
"""column name suffix of each measurement type"""

MEASURE_COLUMNS = ["rfh", "r1h", "r3h", "rfh_avg", "r1h_avg", "r3h_avg", "rfq", "r1q", "r3q"]

RAW_ID_COLUMNS = {"date": "date", "location_code": "location", "n_pixels": "resolution"}
ID_COLUMNS = list(RAW_ID_COLUMNS.values())
GROUP_COLUMNS = ["location", "resolution", "window"]
SERIES_COLUMNS = ["date"] + list(KINDS.values())

MONTHLY_ANCHOR_DAY = 21
QUARTERLY_ANCHOR_MONTHS = (3, 6, 9, 12)

_COLUMN_PATTERN = re.compile(r"^(rf|r1|r3)(h_avg|h|q)$")


def _parse_column(name: str) -> tuple[str, str]:
    match = _COLUMN_PATTERN.match(str(name))
    if match is None:
        raise DataShapeError(f"can not parse window and type from column '{name}'")
    prefix, suffix = match.groups()
    return WINDOWS[prefix], KINDS[suffix]


def melt(raw: pandas.DataFrame) -> pandas.DataFrame:
    """
    unpivot the measurement columns of wide decadal records.

    Args:
        raw: one row per date, location and resolution with columns `date`, `location_code`, `n_pixels` and
            any of the measurement columns (`rfh`, `r1h_avg`, `r3q`, ...)

    Returns:
        `DataFrame` with columns `date`, `location`, `resolution`, `window`, `kind`, and `amount`
    """
    if "window" in raw.columns:
        raise DataShapeError("data is already in long format")
    _check_columns(raw, RAW_ID_COLUMNS)

    measures = [nm for nm in raw.columns if nm not in RAW_ID_COLUMNS and nm != "location_name"]
    if not measures:
        raise DataShapeError("no measurement columns found")
    tags = {nm: _parse_column(nm) for nm in measures}

    if raw.duplicated(subset=list(RAW_ID_COLUMNS)).any():
        raise DataShapeError("found more than one row for the same date, location and resolution")

    long = raw.rename(columns=RAW_ID_COLUMNS).melt(id_vars=ID_COLUMNS,
                                                   value_vars=measures,
                                                   var_name="column",
                                                   value_name="amount")
    long["window"] = long["column"].map(lambda nm: tags[nm][0])
    long["kind"] = long["column"].map(lambda nm: tags[nm][1])
    long = long.drop(columns="column")
    long.attrs["measures"] = measures
    return long


def pivot(long: pandas.DataFrame) -> pandas.DataFrame:
    """
    re-pivot unpivoted records by measurement type so that each window has its own `value`, `average`, and
    `anomaly` columns
    """
    _check_columns(long, ID_COLUMNS + ["window", "kind", "amount"])
    measures = long.attrs.get("measures")
    tidy = long.pivot(index=ID_COLUMNS + ["window"], columns="kind", values="amount")
    tidy = tidy.reindex(columns=list(KINDS.values())).reset_index()
    tidy.columns.name = None
    if measures is not None:
        tidy.attrs["measures"] = list(measures)
    return tidy


def to_wide(tidy: pandas.DataFrame, columns: list[str] = None) -> pandas.DataFrame:
    """
    inverse of `pivot(melt(raw))`. recovers the wide layout with the original column names.

    Args:
        tidy: re-pivoted records
        columns: measurement columns to return. default is the columns `tidy` was unpivoted from, or every column
            with data if that is not known
    """
    _check_columns(tidy, ID_COLUMNS + ["window"])
    if columns is None:
        columns = tidy.attrs.get("measures")
    kinds = [nm for nm in KINDS.values() if nm in tidy.columns]
    names = {(window, kind): prefix + suffix for prefix, window in WINDOWS.items() for suffix, kind in KINDS.items()}

    long = tidy.melt(id_vars=ID_COLUMNS + ["window"], value_vars=kinds, var_name="kind", value_name="amount")
    long["column"] = [names[(window, kind)] for window, kind in zip(long["window"], long["kind"])]
    wide = long.pivot(index=ID_COLUMNS, columns="column", values="amount")
    if columns is None:
        columns = [nm for nm in MEASURE_COLUMNS if nm in wide.columns and wide[nm].notna().any()]
    for nm in columns:
        _parse_column(nm)
    wide = wide.reindex(columns=list(columns)).reset_index()
    wide.columns.name = None
    return wide.rename(columns={v: k for k, v in RAW_ID_COLUMNS.items()})


def _is_anchor(window: str, dates: pandas.Series, anchor_day: int) -> pandas.Series:
    if window == "monthly":
        return dates.dt.day == anchor_day
    if window == "quarterly":
        return (dates.dt.day == anchor_day) & dates.dt.month.isin(QUARTERLY_ANCHOR_MONTHS)
    return pandas.Series(True, index=dates.index)


def resample(tidy: pandas.DataFrame, anchor_day: int = MONTHLY_ANCHOR_DAY) -> pandas.DataFrame:
    """
    keep only the native reporting points of each window. the monthly and quarterly values are restated for every
    dekad as rolling totals; only the dekad on `anchor_day` (of a quarter-end month for quarterly) is a new value.
    """
    keep = pandas.Series(False, index=tidy.index)
    for window in WINDOWS.values():
        keep |= (tidy["window"] == window) & _is_anchor(window, tidy["date"], anchor_day)
    return tidy[keep].reset_index(drop=True)


def split(tidy: pandas.DataFrame, pairs: list[tuple] = None) -> dict[tuple, pandas.DataFrame]:
    """
    split tidy records into date-ordered series keyed by `(location, resolution, window)`.

    Args:
        tidy: tidy records
        pairs: `(location, resolution)` pairs to return. pairs without rows get empty series for every window.
            default is every pair in `tidy`

    Returns:
        `dict` of `DataFrame` with columns `date`, `value`, `average`, and `anomaly`
    """
    if pairs is None:
        pairs = list(tidy[["location", "resolution"]].drop_duplicates().itertuples(index=False, name=None))

    groups = {key: group for key, group in tidy.groupby(GROUP_COLUMNS)}
    empty = pandas.DataFrame({nm: tidy[nm].iloc[0:0] for nm in SERIES_COLUMNS})

    series = {}
    for location, resolution in pairs:
        for window in WINDOWS.values():
            key = (location, resolution, window)
            group = groups.get(key)
            if group is None:
                warnings.warn(f"no {window} records for location {location} at resolution {resolution}")
                series[key] = empty.copy()
                continue
            group = group.sort_values("date")[SERIES_COLUMNS].reset_index(drop=True)
            _check_sorted(group["date"])
            series[key] = group
    return series


def add_location_names(tidy: pandas.DataFrame, names: pandas.DataFrame) -> pandas.DataFrame:
    """
    left join location names onto tidy records. codes without a name keep a null `location_name`.

    Args:
        tidy: tidy records with a `location` column
        names: table with columns `location_code` and `location_name`
    """
    _check_columns(names, ["location_code", "location_name"])
    names = names[["location_code", "location_name"]].drop_duplicates("location_code")
    names = names.rename(columns={"location_code": "location"})
    named = tidy.merge(names, on="location", how="left")

    unmatched = named.loc[named["location_name"].isna(), "location"].unique()
    if len(unmatched) > 0:
        warnings.warn(f"no names found for locations: {list(unmatched)}")
    return named


class Records:
    def __init__(self,
                 rain: Union[str, pandas.DataFrame],
                 names: pandas.DataFrame = None,
                 date_format: str = None,
                 anchor_day: int = MONTHLY_ANCHOR_DAY):
        """
        Class that reshapes wide decadal rainfall records into tidy series for each location, resolution, and window.

        Args:
            rain: pandas Dataframe with decadal records or path to the csv file containing them. must have columns
                `date`, `location_code`, `n_pixels` and some of `rfh`, `r1h`, `r3h`, `rfh_avg`, `r1h_avg`, `r3h_avg`,
                `rfq`, `r1q`, `r3q`
            names: optional table with columns `location_code` and `location_name`
            date_format: format to use for parsing date column
            anchor_day: day of month on which monthly and quarterly values are reported
        """
        raw = self.__read_records(rain, date_format)
        tidy = pivot(melt(raw))
        pairs = list(tidy[["location", "resolution"]].drop_duplicates().itertuples(index=False, name=None))
        tidy = resample(tidy, anchor_day)

        self.series = split(tidy, pairs)
        "series keyed by `(location, resolution, window)`"

        if names is not None:
            tidy = add_location_names(tidy, names)
        self.data = tidy.sort_values(GROUP_COLUMNS + ["date"]).reset_index(drop=True)
        "tidy records in long format at the native frequency of each window"

    @staticmethod
    def __read_records(data, date_format):
        if isinstance(data, str):
            raw = pandas.read_csv(data)
        elif isinstance(data, pandas.DataFrame):
            raw = data.copy()
        else:
            raise ValueError("'rain' is not valid")

        _check_columns(raw, RAW_ID_COLUMNS)
        if not types.is_datetime64_any_dtype(raw["date"]):
            raw["date"] = pandas.to_datetime(raw["date"], format=date_format)

        for nm in raw.columns:
            if nm in RAW_ID_COLUMNS or nm == "location_name":
                continue
            if not types.is_numeric_dtype(raw[nm]):
                raw[nm] = pandas.to_numeric(raw[nm], errors="coerce")
        return raw

    @property
    def locations(self) -> list:
        """locations with records"""
        return sorted({location for location, _, _ in self.series})

    def resolutions(self, location) -> list:
        """resolutions (pixel counts) available for `location`, in ascending order"""
        return sorted({resolution for loc, resolution, _ in self.series if loc == location})

    def get_series(self, location, resolution=None, window: str = "monthly") -> pandas.DataFrame:
        """
        get the series of one location, resolution, and window

        Args:
            location: location code
            resolution: number of pixels. default is the highest resolution available for `location`
            window: one of `decadal`, `monthly`, or `quarterly`

        Returns:
            `DataFrame` with columns `date`, `value`, `average`, and `anomaly`. may be empty if no record of `window`
                falls on an anchor date
        """
        if window not in WINDOWS.values():
            raise DataShapeError(f"'window' has to be in {list(WINDOWS.values())}")

        if resolution is None:
            available = self.resolutions(location)
            if not available:
                raise EmptySeriesError(f"no records for location {location}")
            resolution = available[-1]

        key = (location, resolution, window)
        if key not in self.series:
            raise EmptySeriesError(f"no records for location {location} at resolution {resolution}")
        return self.series[key].copy()
