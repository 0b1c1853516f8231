"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, version handling, paginated transport
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

Fetch functions return pandas DataFrames with API column names preserved
(``entity_ID``, ``taxon_ID``, ...) and numeric columns coerced, so the
analysis layer never sees raw JSON.

Adding a new endpoint
---------------------
1. Add ``datasources/{name}/{feature}.py`` with a function calling
   ``client.fetch_table(query, params, version)``.
2. Coerce identifier and flag columns with ``client.to_numeric``.
3. Re-export it in ``__init__.py`` with ``__all__``.
4. Add tests in ``tests/test_datasources.py`` patching ``client.fetch_json``.
"""
