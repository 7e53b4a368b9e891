"""Space compliance engine.

Determines which provisions of the EU Space Act, the NIS2 directive, the UK
Space Industry Act and the US commercial space regulations apply to an
operator, grades current compliance, and produces a prioritized remediation
plan.
"""

__version__ = "0.1.0"
