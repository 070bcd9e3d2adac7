"""PropertyEngine: the get / set / definition operations over any instance."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from inspector_mcp.metrics import metrics

from .applier import PathApplier
from .errors import CountMismatch, NotFound
from .inspector import COMMON_TYPES, InstanceInfo, InstanceInspector
from .typedef import COMMON_TYPES_DEFINITION, synthesize
from .unwrap import unwrap

logger = logging.getLogger("inspector-mcp.properties.engine")


class PropertyEngine:
    """Inspect and mutate scene nodes, components, assets and settings.

    Args:
        editor: collaborator exposing the editor message bus
            (see editor_bridge.AsyncEditorBridge).
        registry: frozen importer name -> capability map, see
            inspector_mcp.importers.build_registry().
    """

    def __init__(self, editor, registry: Mapping):
        self.editor = editor
        self.registry = registry
        self.inspector = InstanceInspector(editor, registry)
        self.applier = PathApplier(editor, registry)

    async def _require(self, reference_id: str, adapt_node: bool = True) -> InstanceInfo:
        info = await self.inspector.inspect(reference_id, adapt_node=adapt_node)
        if info is None:
            raise NotFound(f"Target {reference_id} not found or not supported", instance=reference_id)
        return info

    async def get(self, reference_id: str) -> dict:
        """Plain JSON view of the instance's visible properties."""
        with metrics.operation("get"):
            info = await self._require(reference_id)
            if info.graph is None:
                raise NotFound(f"Could not retrieve properties for {info.type}", instance=reference_id)
            return unwrap(info.graph)

    async def set(self, reference_id: str, property_paths: list[str], values: list[Any]) -> dict:
        """Set each path to the value at the same position.

        Raises CountMismatch before touching anything when the lists differ
        in length, and PartialSetError after the batch when any pair failed.
        Pairs that succeeded stay committed.
        """
        if len(property_paths) != len(values):
            raise CountMismatch(
                f"Property paths count ({len(property_paths)}) does not match values count ({len(values)})",
                instance=reference_id,
            )

        with metrics.operation("set"):
            info = await self._require(reference_id, adapt_node=False)
            if info.graph is None:
                raise NotFound(f"Could not retrieve properties for {info.type}", instance=reference_id)
            await self.applier.set_properties(info, property_paths, values)
        logger.info("Set %d propert%s on %s", len(property_paths),
                    "y" if len(property_paths) == 1 else "ies", reference_id)
        return {"success": True}

    async def definition(self, reference_id: str) -> str:
        if reference_id == COMMON_TYPES:
            return COMMON_TYPES_DEFINITION

        with metrics.operation("definition"):
            info = await self._require(reference_id)
            if info.graph is None:
                return ""
            root_name = info.type + "Importer" if info.asset_backed else info.type
            return "\n".join(synthesize(info.graph, root_name))
