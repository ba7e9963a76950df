from pydantic import BaseModel, Field

from gtfsrt_validator.models.results import ValidationReport, ValidationRule


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


class RuleCatalogResponse(BaseModel):
    rules: list[ValidationRule]
    count: int = Field(description="Number of rules returned")


class ValidateFeedResponse(BaseModel):
    """Result of one fetch-and-validate iteration."""

    url: str | None = None
    fetched: bool = Field(description="Whether the feed could be fetched and decoded")
    report: ValidationReport | None = None
    error_count: int = Field(default=0, description="Occurrences of ERROR rules")
    warning_count: int = Field(default=0, description="Occurrences of WARNING rules")
