import numpy
import pandas
import pytest

from conftest import monthly_series
from pyrwh import Records, Rain, WaterYearAligner, get_year_start, ConfigurationError, DataShapeError, EmptySeriesError


def test_year_start_is_wettest_month():
    assert get_year_start(monthly_series(range(24))) == 8


def test_year_start_tie_goes_to_earliest_date():
    data = pandas.DataFrame({"date": pandas.to_datetime(["2018-07-21", "2018-08-21", "2019-03-21"]),
                             "average": [10.0, 5.0, 10.0]})
    assert get_year_start(data) == 7
    assert get_year_start(data.iloc[::-1]) == 7


def test_year_start_from_records(raw_records):
    monthly = Records(raw_records).get_series("ET01")
    assert WaterYearAligner.from_climatology(monthly).year_start == 8


def test_year_start_without_averages():
    data = pandas.DataFrame({"date": pandas.to_datetime(["2018-07-21"]), "average": [numpy.nan]})
    with pytest.raises(EmptySeriesError):
        get_year_start(data)


def test_water_year_boundary():
    data = pandas.DataFrame({"date": pandas.to_datetime(["2020-08-15", "2020-09-15"]), "value": [1.0, 2.0]})
    rain = WaterYearAligner(9).align(data)
    assert isinstance(rain, Rain)
    assert rain.year_start == 9
    assert rain.data.water_year.tolist() == [2019, 2020]


def test_january_start_follows_calendar_year():
    rain = WaterYearAligner(1).align(monthly_series([1.0] * 24))
    assert rain.data.water_year.tolist() == [2018] * 12 + [2019] * 12


def test_cumulative_resets_at_water_year_boundary():
    rain = WaterYearAligner(8).align(monthly_series(range(1, 25)))
    data = rain.data

    first = data.index[(data.water_year != data.water_year.shift()) & (data.index > 0)]
    assert len(first) == 2
    for i in first:
        assert data.loc[i, "cumulative"] == data.loc[i, "value"]

    for _, year in data.groupby("water_year"):
        assert year.cumulative.is_monotonic_increasing
        assert year.cumulative.iloc[-1] == pytest.approx(year.value.sum())


def test_totals_are_year_end_cumulative():
    rain = WaterYearAligner(1).align(monthly_series([10.0] * 12 + [20.0] * 12))
    assert rain.totals.to_dict() == {2018: 120.0, 2019: 240.0}


def test_missing_rainfall_is_filled_with_zero():
    data = monthly_series([1.0, numpy.nan, 2.0])
    with pytest.warns(UserWarning, match="NA values"):
        rain = WaterYearAligner(1).align(data)
    assert rain.data.cumulative.tolist() == [1.0, 1.0, 3.0]


@pytest.mark.parametrize("year_start", [0, 13])
def test_invalid_year_start(year_start):
    with pytest.raises(ConfigurationError):
        WaterYearAligner(year_start)


def test_unsorted_dates_are_rejected():
    data = monthly_series(range(6)).iloc[::-1]
    with pytest.raises(DataShapeError):
        WaterYearAligner(9).align(data)


def test_duplicated_dates_are_rejected():
    data = monthly_series(range(6))
    with pytest.raises(DataShapeError):
        WaterYearAligner(9).align(pandas.concat([data.head(1), data], ignore_index=True))


def test_empty_series_is_rejected():
    with pytest.raises(EmptySeriesError):
        WaterYearAligner(9).align(monthly_series([]))


def test_align_many_skips_empty_series(raw_records):
    records = Records(raw_records)
    series = dict(records.series)
    series[("ET01", 10, "empty")] = monthly_series([])

    aligned = WaterYearAligner(8).align_many(series)
    assert set(aligned) == set(records.series)
    assert all(rain.year_start == 8 for rain in aligned.values())
    pandas.testing.assert_frame_equal(aligned[("ET01", 5, "monthly")].data,
                                      WaterYearAligner(8).align(records.series[("ET01", 5, "monthly")]).data)


@pytest.mark.parametrize("year_start", [8.5, 8.0, "8", True])
def test_year_start_must_be_whole_month(year_start):
    with pytest.raises(ConfigurationError):
        WaterYearAligner(year_start)


def test_year_start_accepts_numpy_integers():
    assert WaterYearAligner(numpy.int64(9)).year_start == 9
