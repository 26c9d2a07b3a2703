"""Index backend layer — Pluggable connectors for search engines.

Built-in backends:
  - opensearch: OpenSearch v2+ via ``opensearch-py`` (query_string search)
  - meilisearch: MeiliSearch via its REST API
  - memory: in-process index for tests and local runs

Implement ``IndexBackend`` to connect your own search engine.
"""
