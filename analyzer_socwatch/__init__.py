"""
analyzer_socwatch — threading-behaviour profiles from Intel SoC Watch reports.

Parses PTAT-monitor CSV exports into per-core profiles, derives P-core /
E-core insights, and manages groups of profiles for side-by-side comparison.
"""

__version__ = "1.0.0"
ANALYZER_VERSION = "v1"
PACKAGE_NAME = "analyzer_socwatch"
SCHEMA_VERSION = "1.0"
