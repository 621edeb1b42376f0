"""Build stages: discovery, parsing, normalization, ordering, packing, manifest.

Each stage exposes a small function API; the orchestrator calls them in order
and owns no transformation logic of its own.
"""
