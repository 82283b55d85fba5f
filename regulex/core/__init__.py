"""
Core domain layer.

System role: Document processing pipeline, retrieval and exceptions
"""
