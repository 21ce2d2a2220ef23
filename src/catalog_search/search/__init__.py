"""
Index schema and lifecycle package.

- naming: deterministic field names
- schema: field mapping value objects
- analyzers: analyzer/filter graph
- schema_builder: field mappings from catalog metadata
- fields: queryable field selection
- bulk: bulk wire format
- lifecycle: generation rebuild + alias swap
- dispatch: search and autocomplete
"""
