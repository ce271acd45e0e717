"""Infraestrutura: repositório SQL, conversores e binding SQLAlchemy."""
