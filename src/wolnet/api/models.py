"""Pydantic request/response models for the wolnet API."""

from typing import Optional

from pydantic import BaseModel


class WakeRequest(BaseModel):
    name: str


class WakeResponse(BaseModel):
    status: str
    name: str
    targets: list[str]


class MachineResponse(BaseModel):
    name: str
    mac: str
    ip: Optional[str]


class MachinesResponse(BaseModel):
    machines: list[MachineResponse]
