"""Domain layer: catalog types, normalizer, resolver and the ingest pipeline."""
