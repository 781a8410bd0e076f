"""Application use cases."""

from realincome.application.use_cases.countries import ListCountriesUseCase
from realincome.application.use_cases.real_income import (
    ComputeRealIncomeRequest,
    ComputeRealIncomeResponse,
    ComputeRealIncomeUseCase,
)

__all__ = [
    "ComputeRealIncomeRequest",
    "ComputeRealIncomeResponse",
    "ComputeRealIncomeUseCase",
    "ListCountriesUseCase",
]
