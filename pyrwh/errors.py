class PyrwhError(ValueError):
    """base class for errors raised by `pyrwh`"""


class DataShapeError(PyrwhError):
    """input data is missing columns, has unparseable column names, or has duplicated/unsorted dates"""


class ConfigurationError(PyrwhError):
    """a parameter is outside of its valid range"""


class EmptySeriesError(PyrwhError):
    """a required selection (location, resolution, window or date range) has no rows"""
