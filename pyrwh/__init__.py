"""
# pyrwh

A python package for sizing rainwater harvesting tanks from historical decadal rainfall records - simulating the
monthly water balance of a tank and finding the storage needed to meet a fixed demand.

## Method

1. Decadal rainfall records come in wide format, one column per aggregation window (`rf` 10-day, `r1` 1-month,
    `r3` 3-month) and measurement (`h` observed, `h_avg` long-term average, `q` anomaly). The records are reshaped
    into one tidy series per location, resolution, and window. Monthly and quarterly values are restated every
    dekad as rolling totals, so only the dekads on the reporting day (the 21st) are kept.
2. The water year starts in the calendar month with the highest long-term average rainfall. Each observation is
    tagged with its water year (months before the start month belong to the previous year) and the rainfall
    accumulated since the start of the water year.
3. *Balance simulation*: starting with an empty tank, each month gains `rain * 0.001 * area * efficiency` m³ and
    loses one twelfth of the yearly demand. The balance is clipped between zero and the tank capacity; the excess
    is overflow, the shortfall is deficit. Counting the three outcomes by calendar month gives their probabilities.
4. *Capacity sizing*:
    - The total rainfall of each water year is calculated to obtain *observed totals*.
    - The quantile of the *observed totals* at the exceedance probability (default `0.05`) is the design rainfall.
        The driest water year with a total at or above the design rainfall is the *base year*.
    - The capture area collects exactly the yearly demand at the design rainfall.
    - Replaying the base year, the storage has to hold the largest surplus of cumulative capture over cumulative
        demand.

## Usage

```python
import pyrwh

records = pyrwh.Records("./data/rainfall.csv")
monthly = records.get_series("ETH001", window="monthly")
aligner = pyrwh.WaterYearAligner.from_climatology(monthly)
rain = aligner.align(monthly)

balance = rain.simulate_balance(pyrwh.BalanceConfig(demand=50, efficiency=0.8, area=100, storage=10))
base_case = rain.size_capacity(pyrwh.CapacityConfig(demand=50, efficiency=0.8, exceedance_probability=0.05))
```
"""

from .errors import PyrwhError, DataShapeError, ConfigurationError, EmptySeriesError
from .config import BalanceConfig, CapacityConfig, load_config, save_config
from .records import Records, to_wide
from .rain import Rain
from .water_year import WaterYearAligner, get_year_start
from .balance import Balance, simulate_balance
from .capacity import BaseCase, size_capacity
