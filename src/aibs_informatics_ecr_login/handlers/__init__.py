"""Lambda handler implementations.

Contains Lambda handlers vending docker login credentials for ECR registries.
"""
