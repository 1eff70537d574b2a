# ftse_ranker/errors.py — Pipeline error kinds


class PipelineError(Exception):
    """Base for every error the pipeline surfaces to its caller."""


class SourceError(PipelineError):
    def __init__(self, source: str, message: str):
        self.source  = source
        self.message = message
        super().__init__(f"{source}: {message}")


class SourceUnavailable(SourceError):
    """Transport failure: network error, non-2xx response, missing file."""


class SourceFormatChanged(SourceError):
    """Structural assumption violated: missing section/table/field or too few rows."""


class QuoteBatchFailed(PipelineError):
    def __init__(self, symbols: list, cause: Exception):
        self.symbols = list(symbols)
        self.cause   = cause
        super().__init__(f"quote batch of {len(self.symbols)} failed "
                         f"({self.symbols[0] if self.symbols else '?'}…): {cause}")
