"""Common Lambda utilities and base classes.

Provides the base handler class and logging used by the ECR login Lambda handlers.
"""
