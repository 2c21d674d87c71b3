"""
Batch import orchestration.
"""

from .pipeline import ImportPipeline, build_date_range_query

__all__ = [
    "ImportPipeline",
    "build_date_range_query",
]
