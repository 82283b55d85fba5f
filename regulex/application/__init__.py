"""
Application layer.

System role: Caller-facing services over the document processing pipeline
"""
