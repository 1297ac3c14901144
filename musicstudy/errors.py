class DatasourceError(Exception):
    pass


class DatabaseConnectionError(DatasourceError):
    pass


class QueryError(DatasourceError):
    pass
