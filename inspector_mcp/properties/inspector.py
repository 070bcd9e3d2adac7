"""Turn an opaque reference id into an inspectable instance.

Lookup order: the special settings ids, then scene node, component and
finally asset. Node and component dumps come from the scene process; asset
graphs come from the importer registered for the asset's category.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from editor_bridge import EditorRequestError

from .errors import ParseError
from .model import OBJECT_REFERENCE, PropertyGraph

logger = logging.getLogger("inspector-mcp.properties.inspector")

CURRENT_SCENE_GLOBALS = "CurrentSceneGlobals"
PROJECT_SETTINGS = "ProjectSettings"
COMMON_TYPES = "CommonTypes"

SCENE_GLOBALS_TYPE = "cc.SceneGlobals"
NODE_TYPE = "cc.Node"
COMPONENT_TYPE = "cc.Component"

# InstanceInfo.kind
KIND_NODE = "node"
KIND_COMPONENT = "component"
KIND_SCENE_GLOBALS = "scene-globals"
KIND_ASSET = "asset"

_COMPS_TOOLTIP = (
    "cc.Component is a basic type for component. Inspect specific component "
    "instance for its definition. You can change actual instances properties "
    "via __comps__.i prefix of node"
)


@dataclass
class InstanceInfo:
    uuid: str
    type: str
    kind: str
    graph: Optional[PropertyGraph]
    asset_info: Optional[dict] = None

    @property
    def asset_backed(self) -> bool:
        return self.asset_info is not None


class InstanceInspector:
    """Resolves reference ids against the editor and the importer registry."""

    def __init__(self, editor, registry: Mapping):
        self.editor = editor
        self.registry = registry

    async def inspect(self, target_id: str, adapt_node: bool = True) -> Optional[InstanceInfo]:
        """Find the instance behind `target_id`, or None.

        With `adapt_node` the node dump is reshaped for reading: components
        collapse to reference ids, children are hidden behind an empty
        readonly list. Writes inspect the raw dump instead.
        """
        if target_id == CURRENT_SCENE_GLOBALS:
            return await self._inspect_scene_globals()
        if target_id == PROJECT_SETTINGS:
            return await self._inspect_project_settings()

        node_dump = await self._query("query_node", target_id)
        if node_dump:
            return InstanceInfo(
                uuid=target_id,
                type=_node_type(node_dump),
                kind=KIND_NODE,
                graph=PropertyGraph.from_dump(adapt_node_dump(node_dump) if adapt_node else _compact(node_dump)),
            )

        comp_dump = await self._query("query_component", target_id)
        if comp_dump:
            fields = comp_dump.get("value") or comp_dump
            return InstanceInfo(
                uuid=target_id,
                type=comp_dump.get("type") or COMPONENT_TYPE,
                kind=KIND_COMPONENT,
                graph=PropertyGraph.from_dump(adapt_component_dump(fields)),
            )

        asset_info = await self._query("query_asset_info", target_id)
        if asset_info:
            return InstanceInfo(
                uuid=target_id,
                type=asset_info.get("type"),
                kind=KIND_ASSET,
                graph=await self._asset_graph(asset_info),
                asset_info=asset_info,
            )

        logger.debug("No node, component or asset found for %s", target_id)
        return None

    async def _query(self, method: str, target_id: str) -> Any:
        """Call one editor lookup; a host-side refusal means "not this kind"."""
        try:
            return await getattr(self.editor, method)(target_id)
        except EditorRequestError as e:
            logger.debug("%s(%s) declined: %s", method, target_id, e)
            return None

    async def _asset_graph(self, asset_info: dict) -> Optional[PropertyGraph]:
        importer = self.registry.get(asset_info.get("importer"))
        if importer is None:
            logger.warning("No importer registered for '%s' (%s)", asset_info.get("importer"), asset_info.get("uuid"))
            return None
        return await importer.get_properties(asset_info)

    async def _inspect_scene_globals(self) -> Optional[InstanceInfo]:
        tree = await self.editor.query_node_tree()
        if not tree or not tree.get("uuid"):
            logger.warning("No scene is open; %s unavailable", CURRENT_SCENE_GLOBALS)
            return None
        scene_dump = await self.editor.query_node(tree["uuid"])
        if not scene_dump or not scene_dump.get("_globals"):
            logger.warning("Scene %s carries no _globals", tree["uuid"])
            return None
        return InstanceInfo(
            uuid=tree["uuid"],
            type=SCENE_GLOBALS_TYPE,
            kind=KIND_SCENE_GLOBALS,
            graph=PropertyGraph.from_dump(adapt_component_dump(scene_dump["_globals"])),
        )

    async def _inspect_project_settings(self) -> InstanceInfo:
        asset_info = {"uuid": PROJECT_SETTINGS, "type": PROJECT_SETTINGS, "importer": "project-settings"}
        return InstanceInfo(
            uuid=PROJECT_SETTINGS,
            type=PROJECT_SETTINGS,
            kind=KIND_ASSET,
            graph=await self._asset_graph(asset_info),
            asset_info=asset_info,
        )


def _compact(dump: Mapping) -> dict:
    return {key: val for key, val in dump.items() if val is not None}


def _node_type(node_dump: Mapping) -> str:
    node_type = node_dump.get("__type__")
    if isinstance(node_type, Mapping):
        node_type = node_type.get("value")
    return node_type or NODE_TYPE


def _component_uuid(comp: Any) -> Optional[str]:
    """uuid of one entry of a node's `__comps__` dump."""
    if not isinstance(comp, Mapping):
        return None
    uuid = (comp.get("value") or {}).get("uuid")
    if isinstance(uuid, Mapping):
        uuid = uuid.get("value")
    return uuid


def adapt_node_dump(node_dump: Mapping) -> dict:
    """Reshape a node dump for reading."""
    fields = _compact(node_dump)
    for key in ("__comps__", "children", "__type__"):
        if key not in fields:
            raise ParseError(f"Missing {key} property for Node class")

    fields["__comps__"] = {
        "value": [
            {"value": {"id": _component_uuid(comp)}, "type": COMPONENT_TYPE, "extends": [OBJECT_REFERENCE]}
            for comp in fields["__comps__"]
        ],
        "type": COMPONENT_TYPE,
        "extends": [OBJECT_REFERENCE],
        "isArray": True,
        "tooltip": _COMPS_TOOLTIP,
    }
    fields["children"] = {"value": [], "type": NODE_TYPE, "isArray": True, "readonly": True}
    fields["__type__"] = {"value": NODE_TYPE, "type": "String", "visible": False}
    return fields


def adapt_component_dump(dump: Mapping) -> dict:
    """Component dumps: surface `enabled`, which the editor hides."""
    fields = _compact(dump)
    enabled = fields.get("enabled")
    if isinstance(enabled, Mapping) and "visible" in enabled:
        fields["enabled"] = {**enabled, "visible": True}
    return fields


def component_index(node_dump: Mapping, component_uuid: str) -> int:
    """Position of a component in its node's `__comps__`, or -1."""
    for idx, comp in enumerate(node_dump.get("__comps__") or []):
        if _component_uuid(comp) == component_uuid:
            return idx
    return -1
