# datasources/exceptions.py

class DataSourceError(Exception):
    pass


class DataSourceUnavailable(DataSourceError):
    pass


class QueryTimeout(DataSourceError):
    pass


class BadResponse(DataSourceError):
    pass


class BackendStartupTimeout(DataSourceError):
    pass
