"""AIBS Informatics ECR login.

Resolves docker login credentials for Amazon Elastic Container Registry (ECR) registries,
caching authorization tokens and falling back to cached tokens when ECR is unavailable.
"""
