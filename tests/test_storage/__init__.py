"""
Storage module tests for auditstore.

Tests cover:
- Type definitions and Pydantic validation (test_types.py)
- Cost estimation (test_cost.py)
- EndpointRegistry ordering and validation (test_endpoints.py)
- BlobUploader failover and paid deployment (test_uploader.py)
- BlobRetriever fetch passes and HEAD checks (test_retriever.py)
- StatusProbe availability and polling (test_status.py)
"""
