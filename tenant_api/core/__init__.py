"""Core application components.

This module provides the foundational components for the Tenant API:
- Database client access and the membership store interface
- Application settings and configuration
- Logging setup shared across domains
"""
