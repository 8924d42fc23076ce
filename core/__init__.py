"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- data loading (CSV -> pandas) and the read-only record store
- query normalization and validation
- the query pipeline (search, filter, sort, paginate)
- filter-option facets and URL query state helpers
"""
