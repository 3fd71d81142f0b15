from typing import Annotated, Self

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from viewring.bootstrap.config.loader import get_configfile
from viewring.core.models.topology import NodePhase
from viewring.core.space.hashspace import HashSpace


class NodeSettings(BaseModel):
    id: Annotated[
        str,
        Field(
            description=(
                "Identifier of the local node.\n"
                "This is the endpoint acting as a base replica when resolving the\n"
                "view replica to write to. It must be one of the declared topology\n"
                "nodes."
            )
        )
    ]


class MemberSettings(BaseModel):
    id: Annotated[
        str,
        Field(description="Unique and stable identifier of the node (its endpoint).")
    ]

    datacenter: Annotated[
        str,
        Field(description="Datacenter hosting the node.")
    ]

    tokens: Annotated[
        list[int],
        Field(
            description=(
                "128-bit tokens owned by the node's vnodes.\n"
                "Each token must lie in [0, 2^128)."
            ),
            min_length=1
        )
    ]

    phase: Annotated[
        NodePhase,
        Field(
            description=(
                "Lifecycle phase of the node.\n"
                "ready    → owns its tokens.\n"
                "joining  → bootstrapping, will own its tokens.\n"
                "draining → decommissioning, still owns its tokens."
            ),
            default=NodePhase.ready
        )
    ]

    @field_validator("tokens")
    @classmethod
    def validate_tokens(cls, v: list[int]) -> list[int]:
        for token in v:
            if not 0 <= token < HashSpace.MAX:
                raise ValueError(f"Token {token} is outside of the 128-bit hash space.")
        return v


class TopologySettings(BaseModel):
    keyspaces: Annotated[
        dict[str, dict[str, int]],
        Field(
            description=(
                "Replication settings per keyspace.\n"
                "Maps each keyspace to its replication factor per datacenter,\n"
                "e.g. {'ks': {'dc1': 3, 'dc2': 2}}. Base tables and their views\n"
                "belong to the same keyspace and share these settings."
            )
        )
    ]

    nodes: Annotated[
        list[MemberSettings],
        Field(description="Every node of the cluster, the local node included.")
    ]

    @field_validator("keyspaces")
    @classmethod
    def validate_replication(cls, v: dict[str, dict[str, int]]) -> dict[str, dict[str, int]]:
        for keyspace, factors in v.items():
            if not factors:
                raise ValueError(f"Keyspace {keyspace} has no replication factor.")
            for datacenter, rf in factors.items():
                if rf < 1:
                    raise ValueError(
                        f"Replication factor of {keyspace} in {datacenter} must be >= 1."
                    )
        return v

    @field_validator("nodes")
    @classmethod
    def validate_unique_ids(cls, v: list[MemberSettings]) -> list[MemberSettings]:
        ids = [m.id for m in v]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicated node ids: {', '.join(duplicates)}.")
        return v


class ViewRingConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VIEWRING_",
        extra="allow"
    )

    node: Annotated[
        NodeSettings,
        Field(description="Identity of the local node.")
    ]

    topology: Annotated[
        TopologySettings,
        Field(
            description=(
                "Static description of the cluster.\n"
                "Declares the keyspaces with their replication settings and the\n"
                "nodes with their datacenter, tokens and lifecycle phase."
            )
        )
    ]

    @model_validator(mode="after")
    def validate_local_node(self) -> Self:
        if self.node.id not in {m.id for m in self.topology.nodes}:
            raise ValueError(f"Local node {self.node.id} is not declared in the topology.")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),)
