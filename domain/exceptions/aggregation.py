class AggregationException(Exception):
    pass


class AdapterError(AggregationException):
    pass


class SourceFetchError(AggregationException):
    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        self.message = message
        super().__init__(f'[{source_name}] {message}')


class SourcesUnavailableError(AggregationException):
    pass
