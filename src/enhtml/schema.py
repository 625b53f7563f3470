"""
Inventory snapshot schema.

Contract between whatever gathers host facts and the report renderers.
Each section is a list of flat records exactly as the collector produced
them; the renderers pick the columns they know and fall back to showing
every property.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .document import DEFAULT_DATATABLES_URI, DEFAULT_JQUERY_URI

SCHEMA_VERSION = 1

FlatRecord = Dict[str, Any]


class InventorySnapshot(BaseModel):
    """Facts gathered from one host."""

    schema_version: int = SCHEMA_VERSION
    computer_name: str

    # Shown as key/value lists; every property is displayed.
    operating_system: List[FlatRecord] = Field(default_factory=list)
    computer_system: List[FlatRecord] = Field(default_factory=list)

    # Expected keys: device_id, size, free_space (bytes)
    disks: List[FlatRecord] = Field(default_factory=list)
    # Expected keys: name, id, working_set, virtual_size (bytes)
    processes: List[FlatRecord] = Field(default_factory=list)
    # Expected keys: name, display_name, state, start_mode, start_name
    services: List[FlatRecord] = Field(default_factory=list)
    network_adapters: List[FlatRecord] = Field(default_factory=list)


class ReportOptions(BaseModel):
    """Rendering options, usually built from the command line."""

    title: Optional[str] = None  # default: "System Report: <computer_name>"
    stylesheet: Optional[str] = None
    stylesheet_uri: Optional[str] = None
    use_default_stylesheet: bool = True
    jquery_uri: str = DEFAULT_JQUERY_URI
    datatables_uri: str = DEFAULT_DATATABLES_URI
    dynamic: bool = True  # activate sorting/paging on the large tables


class ReportOutcome(BaseModel):
    """Result of rendering one snapshot file."""

    source: str
    output: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
