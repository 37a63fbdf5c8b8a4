"""
Core modules for genmedia.

This package contains:
- Configuration and the unified request/result types
- Request normalization and response probing
- HTTP transport and task polling
- Provider adapters and model routing
"""
