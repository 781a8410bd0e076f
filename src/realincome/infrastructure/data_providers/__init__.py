"""IMF data provider implementations."""

from realincome.infrastructure.data_providers.imf_datamapper import ImfDataMapperProvider
from realincome.infrastructure.data_providers.imf_sdmx import ImfSdmxCpiProvider
from realincome.infrastructure.data_providers.registry import DataProviderRegistry

__all__ = ["DataProviderRegistry", "ImfDataMapperProvider", "ImfSdmxCpiProvider"]
