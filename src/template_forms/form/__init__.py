"""
Dynamic form engine: field presentation/validation tables and the per-template
form session.
"""

from .fields import check_value, coerce_value, describe_field  # noqa: F401
from .session import DerivedTotals, FormSession, FormState, SubmissionResult, find_derived_totals  # noqa: F401
