"""Declarative base shared by all inspectra models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
