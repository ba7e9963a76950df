"""MCP tools for looking up validation rules."""

from gtfsrt_validator.app import mcp
from gtfsrt_validator.models.responses import RuleCatalogResponse
from gtfsrt_validator.models.results import Severity, ValidationRule
from gtfsrt_validator.validation.rules import get_rule
from gtfsrt_validator.validation.rules import list_rules as _list_rules


@mcp.tool()
def list_rules(severity: str | None = None) -> RuleCatalogResponse:
    """List the GTFS-realtime validation rules.

    Args:
        severity: Optional filter, "ERROR" or "WARNING".

    Returns:
        RuleCatalogResponse with the rules in catalog order.
    """
    level = Severity(severity.upper()) if severity else None
    rules = _list_rules(level)
    return RuleCatalogResponse(rules=rules, count=len(rules))


@mcp.tool()
def describe_rule(code: str) -> ValidationRule:
    """Get the title and description of a rule code such as "E003".

    Raises:
        ValueError: If the code is unknown.
    """
    try:
        return get_rule(code).value
    except KeyError:
        raise ValueError(f"Unknown rule code: {code}") from None
