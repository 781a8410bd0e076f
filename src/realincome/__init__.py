"""
real-income - Inflation-adjusted income calculator backed by IMF data.

Converts a nominal amount into its real value for one country over a date range,
using either monthly CPI index levels (IMF SDMX) or annual inflation rates
(IMF DataMapper, PCPIPCH).
"""

__version__ = "0.3.1"
