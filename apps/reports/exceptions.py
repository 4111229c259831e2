"""
Domain exceptions for reports app.

Raised by the report builders; views turn them into HTTP responses.

Exception Hierarchy:
    ReportServiceError (base)
    ├── InvalidTimeFrameError
    ├── InvalidDateRangeError
    ├── MarketNotFoundError
    └── ChairmanNotFoundError

Usage:
    from apps.reports.exceptions import InvalidDateRangeError

    if start_date > end_date:
        raise InvalidDateRangeError("start_date must be before end_date")
"""


class ReportServiceError(Exception):
    """
    Base exception for all report errors.

        try:
            data = build_export_report(start_date=start, end_date=end)
        except ReportServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidTimeFrameError(ReportServiceError):
    """Raised for a time frame or preset name that is not recognised."""

    pass


class InvalidDateRangeError(ReportServiceError):
    """
    Raised when a date range is invalid.

    Typically when start_date is after end_date, or a custom range is
    missing one of its bounds.
    """

    pass


class MarketNotFoundError(ReportServiceError):
    pass


class ChairmanNotFoundError(ReportServiceError):
    pass
