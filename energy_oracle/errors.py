"""
Error types surfaced by the oracle core.

Upstream failures (timeouts, bad responses, missing credentials) never show
up here: source clients turn them into fallback data. Only defects in the
blending of snapshots escape the core.
"""


class OracleError(Exception):
    """Base class for errors raised by the oracle core.

    Common status codes:
    - 500: Internal Server Error (default) - defect inside the oracle
    """

    code = "ORACLE_ERROR"

    def __init__(self, message: str, status_code: int = 500):
        """
        Initialize an OracleError.

        Args:
            message (str): A human-readable error message.
            status_code (int): HTTP-style status code associated with the error (default: 500).
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class AggregationError(OracleError):
    """A composite indicator could not be computed from the given snapshots."""

    code = "AGGREGATION_ERROR"
