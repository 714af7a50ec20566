"""Error taxonomy for load test runs."""


class LoadTestError(Exception):
    """Base class for errors raised by the load driver and its issuers."""


class FatalConfigError(LoadTestError):
    """Missing credentials or unusable settings. Aborts the whole run."""


class TransientRequestError(LoadTestError):
    """
    A single request failed (network error or non-2xx status).

    Counted and logged; the virtual user keeps going.
    """

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
