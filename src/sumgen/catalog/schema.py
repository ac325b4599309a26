from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict


class PackageDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    path: str = ""


class TypeDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["interface", "struct", "other"] = "struct"
    doc: str = ""
    methods: Dict[str, str] = {}
    pointer_methods: Dict[str, str] = {}
    # "Name", "*Name" or "alias.Name"; struct embeds are embedded fields.
    embeds: List[str] = []
    fields: List[str] = []
    generic: bool = False


class CatalogDTO(BaseModel):
    """On-disk type catalog written by an external front end.

    Method signatures use Go syntax, e.g. ``"(w io.Writer) (int, error)"``;
    qualifiers resolve through ``imports`` (alias -> import path).
    """

    model_config = ConfigDict(extra="forbid")

    package: PackageDTO
    imports: Dict[str, str] = {}
    packages: Dict[str, str] = {}
    types: Dict[str, TypeDTO] = {}
