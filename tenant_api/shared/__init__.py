"""Shared utilities and cross-domain components.

This module contains utilities used across multiple domains:
- Exception classes for consistent error handling
- Permission engine for role-based access control
- Enumerations shared by the datastore and the API
"""
