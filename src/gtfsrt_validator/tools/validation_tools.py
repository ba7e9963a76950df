"""MCP tools for validating a live feed."""

from gtfsrt_validator.app import mcp
from gtfsrt_validator.models.responses import ValidateFeedResponse
from gtfsrt_validator.models.results import Severity
from gtfsrt_validator.services.validation_service import validate_feed_url


@mcp.tool()
async def validate_feed(url: str | None = None) -> ValidateFeedResponse:
    """Fetch a GTFS-realtime feed and validate it.

    Consecutive calls for the same URL also compare the feed with the
    previous iteration (header timestamp checks).

    Args:
        url: Feed URL. Defaults to the GTFSRT_FEED_URL setting.

    Returns:
        ValidateFeedResponse with the ordered rule groups, or fetched=False
        if the feed could not be retrieved.
    """
    report = await validate_feed_url(url)
    if report is None:
        return ValidateFeedResponse(url=url, fetched=False)

    errors = sum(g.count for g in report.groups if g.rule.severity == Severity.ERROR)
    warnings = sum(g.count for g in report.groups if g.rule.severity == Severity.WARNING)
    return ValidateFeedResponse(
        url=url, fetched=True, report=report, error_count=errors, warning_count=warnings
    )
