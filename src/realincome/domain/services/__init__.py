"""Pure domain services: input resolution and computation."""

from realincome.domain.services.computation import (
    compute_from_index,
    compute_from_rates,
    compute_real_income,
    deflator_from_rates,
    index_ratio,
)
from realincome.domain.services.resolver import (
    ResolvedRange,
    normalize_country_code,
    parse_period,
    resolve_date_range,
    resolve_range,
)

__all__ = [
    "ResolvedRange",
    "compute_from_index",
    "compute_from_rates",
    "compute_real_income",
    "deflator_from_rates",
    "index_ratio",
    "normalize_country_code",
    "parse_period",
    "resolve_date_range",
    "resolve_range",
]
