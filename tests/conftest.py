import numpy
import pandas
import pytest

from pyrwh.records import MEASURE_COLUMNS
from pyrwh.water_year import WaterYearAligner

# long-term average monthly rainfall (mm), wettest in August
CLIMATOLOGY = {1: 5, 2: 5, 3: 10, 4: 20, 5: 40, 6: 80, 7: 120, 8: 150, 9: 90, 10: 30, 11: 10, 12: 5}


def dekads(start, end, days=(1, 11, 21)):
    months = pandas.date_range(start, end, freq="MS")
    return [month + pandas.Timedelta(days=day - 1) for month in months for day in days]


def monthly_series(values, start="2018-01-01"):
    """monthly series on the 21st with the default climatology as long-term average"""
    dates = pandas.date_range(start, periods=len(values), freq="MS") + pandas.Timedelta(days=20)
    return pandas.DataFrame({"date": dates,
                             "value": numpy.asarray(values, dtype=float),
                             "average": [float(CLIMATOLOGY[d.month]) for d in dates],
                             "anomaly": 100.0})


@pytest.fixture
def raw_records():
    rng = numpy.random.default_rng(42)
    dates = dekads("2018-01-01", "2020-12-01")
    frames = []
    for resolution in (5, 10):
        frame = pandas.DataFrame({"date": dates, "n_pixels": resolution, "location_code": "ET01"})
        for nm in MEASURE_COLUMNS:
            frame[nm] = rng.uniform(0, 200, len(dates)).round(2)
        frame["r1h_avg"] = [float(CLIMATOLOGY[d.month]) for d in dates]
        frames.append(frame)
    return pandas.concat(frames, ignore_index=True)


@pytest.fixture
def yearly_rain():
    """three calendar water years with totals 100, 150, and 200 mm. all rain of a year falls in its first month"""
    def make(totals=(100, 150, 200), year_start=1):
        values = []
        for total in totals:
            values.extend([total] + [0] * 11)
        return WaterYearAligner(year_start).align(monthly_series(values))
    return make
