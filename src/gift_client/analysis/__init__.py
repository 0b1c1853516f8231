"""Table logic applied after data retrieval.

Pure functions over pandas tables (and shapely geometries); nothing in this
package performs network access.

- subtree.py            nested-set taxonomy lookups
- checklist_filter.py   checklist metadata filters incl. complete taxonomic coverage
- overlap_classifier.py polygon selection against a query shape
- deoverlap.py          removal of overlapping polygons
- env_aggregation.py    join of miscellaneous and raster environmental tables
"""
