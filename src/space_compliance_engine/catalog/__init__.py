"""Requirement catalog package.

Public API:
- RequirementCatalog / FrameworkCatalog: immutable framework catalogs
- load_catalog: load the bundled (or an override) catalog directory
- RemediationTable: static requirement-to-remediation lookup
- Crosswalk: static cross-framework id-to-id mapping
- JurisdictionTable: static national licensing regimes for the unified comparison
"""

from space_compliance_engine.catalog.crosswalk import Crosswalk, CrosswalkEntry
from space_compliance_engine.catalog.inventory import (
    FrameworkCatalog,
    RequirementCatalog,
    load_catalog,
    parse_framework,
)
from space_compliance_engine.catalog.jurisdictions import JurisdictionRecord, JurisdictionTable
from space_compliance_engine.catalog.remediation import RemediationEntry, RemediationTable

__all__ = [
    "Crosswalk",
    "CrosswalkEntry",
    "FrameworkCatalog",
    "JurisdictionRecord",
    "JurisdictionTable",
    "RemediationEntry",
    "RemediationTable",
    "RequirementCatalog",
    "load_catalog",
    "parse_framework",
]
