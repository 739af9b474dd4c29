"""
Shared utilities for the Pricing Access Layer.

This package aggregates common building blocks consumed by the pricing
accessor and its collaborators:

- config: Base configuration via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Cross-cutting logic lives here to avoid import cycles. Do not import from
service packages into shared/.
"""
