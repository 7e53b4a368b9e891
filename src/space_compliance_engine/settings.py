"""Service-specific settings for the space compliance engine.

Settings use the SPACE_COMPLIANCE_ prefix and cover:
- Logging output
- Catalog location override
- Gap summary and immediate-action limits
- Gap priority tie-break between partial and non-compliant statuses
- Report rendering timeout
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the space compliance engine.

    Environment variable prefix: SPACE_COMPLIANCE_
    """

    service_name: str = "space-compliance-engine"

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    log_level: str = Field(default="INFO", description="Minimum log level emitted.")
    log_format: str = Field(
        default="json",
        pattern=r"^(json|console)$",
        description="Log renderer: 'json' for machine-readable output, 'console' for development.",
    )

    # -------------------------------------------------------------------------
    # Requirement catalog
    # -------------------------------------------------------------------------

    catalog_dir: str | None = Field(
        default=None,
        description="Directory holding framework YAML documents. "
        "Leave unset to use the catalog bundled with the package.",
    )
    weight_tolerance: float = Field(
        default=1e-6,
        gt=0,
        description="Allowed deviation from 1.0 when validating weight tables.",
    )

    # -------------------------------------------------------------------------
    # Gap analysis and unified summary
    # -------------------------------------------------------------------------

    gap_summary_limit: int = Field(
        default=10,
        ge=1,
        description="Number of gaps kept in report summaries.",
    )
    immediate_actions_per_framework: int = Field(
        default=2,
        ge=1,
        description="Highest-priority gaps taken from each framework for the unified action list.",
    )
    immediate_actions_cap: int = Field(
        default=5,
        ge=1,
        description="Maximum number of immediate actions in a unified summary.",
    )
    partial_ranks_with_non_compliant: bool = Field(
        default=False,
        description="When true, partial gaps share the non-compliant rank at equal severity. "
        "By default non-compliant ranks strictly above partial.",
    )

    # -------------------------------------------------------------------------
    # Report rendering
    # -------------------------------------------------------------------------

    render_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Hard timeout for a single report render. Timed-out renders return an explicit failure.",
    )

    model_config = SettingsConfigDict(env_prefix="SPACE_COMPLIANCE_")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance.

    Returns:
        Cached Settings loaded from the environment.
    """
    return Settings()
