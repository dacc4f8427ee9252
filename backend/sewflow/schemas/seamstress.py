"""Pydantic schemas for seamstresses."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SeamstressPayload(BaseModel):
    name: str = Field(min_length=1)
    phone: str = ""
    specialty: str = ""
    active: bool = True
    address: Optional[str] = None
    city: Optional[str] = None


class Seamstress(SeamstressPayload):
    id: str
