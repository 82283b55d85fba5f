"""
regulex: chunking, rule extraction, quality review and chunk-aware retrieval
for regulatory text.
"""

__version__ = "0.1.0"
