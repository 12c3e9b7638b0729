from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional


class GraphNodeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    groups: list[str] = []
    colors: list[str] = []
    is_center: bool = Field(False, alias="isCenter")


class GraphEdgeOut(BaseModel):
    source: str
    target: str
    type: str
    color: str


class GraphOut(BaseModel):
    nodes: list[GraphNodeOut]
    edges: list[GraphEdgeOut]


class OrphanOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str = Field(alias="fullName")


class OrphansOut(BaseModel):
    orphans: list[OrphanOut]


class DeletePersonOut(BaseModel):
    ok: bool
    deleted: list[str]


class GroupOption(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class GraphViewOptions(BaseModel):
    """Configuration accepted by GraphView. Accepts camelCase or snake_case keys."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    api_endpoint: str
    groups: Optional[list[GroupOption]] = None
    center_node_id: Optional[str] = None
    center_node_non_clickable: bool = False
    link_distance: float = 120.0
    charge_strength: float = -400.0
    animate_new_nodes: bool = False
    refresh_key: Optional[int] = None
    enable_group_clustering: bool = True
    cluster_strength: float = 0.3

    @field_validator("cluster_strength")
    @classmethod
    def validate_cluster_strength(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("cluster_strength must be between 0 and 1")
        return v

    @field_validator("link_distance")
    @classmethod
    def validate_link_distance(cls, v):
        if v <= 0:
            raise ValueError("link_distance must be positive")
        return v
