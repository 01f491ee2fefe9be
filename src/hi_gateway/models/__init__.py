"""Data models module.

This module contains the identity, request, envelope and certificate models.
"""
