"""
Analytics Errors

Report queries fail in exactly one way from the caller's point of view: the
storage layer could not produce the aggregate.
"""


class AnalyticsError(Exception):
    """Base class for analytics errors"""


class StorageQueryError(AnalyticsError):
    """A report query failed in the storage layer."""

    def __init__(self, report: str, cause: BaseException):
        super().__init__(f"Report '{report}' failed: {type(cause).__name__}")
        self.report = report
        self.cause = cause
