"""
Pipeline package for config-driven credential extraction.

This package implements the operations declared in locations.schema.json:
- decode: text, base64, base64url, json, protobuf_struct, protobuf_metadata, pairs
- lookup: navigate by key or by position
- or: try alternative sub-pipelines, first success wins
"""

from credloc.pipeline.executor import evaluate
from credloc.pipeline.executor import Pipeline
from credloc.pipeline.matcher import extract_strings
from credloc.pipeline.matcher import matches

__all__ = ["Pipeline", "evaluate", "matches", "extract_strings"]
