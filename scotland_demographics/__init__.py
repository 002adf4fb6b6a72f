"""scotland_demographics package initializer.

This package contains the data pipeline behind the Scotland demographics
dashboard.  Modules cover workbook reading, heuristic extraction, CSV
loading, dataset assembly, aggregation and plotting helpers.  See
individual module docstrings for details.
"""
