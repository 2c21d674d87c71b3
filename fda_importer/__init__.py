"""
fda-device-importer: pulls device decisions from openFDA into PostgreSQL.
"""

__version__ = "0.1.0"
