"""Apply (path, value) pairs to an inspected instance.

Each pair is resolved against the instance graph, coerced to the declared
type, then committed either through the asset's importer or through the
scene process. Batches are not atomic: every pair is attempted and the
failures are reported together afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from editor_bridge import EditorBridgeError

from inspector_mcp.metrics import metrics

from .errors import CommitFailed, ImporterNotHandled, NotFound, PartialSetError, PropertyError
from .inspector import KIND_COMPONENT, KIND_SCENE_GLOBALS, InstanceInfo, component_index
from .model import Schema
from .normalizer import normalize, resolve_reference, resolve_reference_list
from .resolver import resolve
from .unwrap import unwrap

logger = logging.getLogger("inspector-mcp.properties.applier")


class PathApplier:

    def __init__(self, editor, registry: Mapping):
        self.editor = editor
        self.registry = registry

    async def set_properties(self, info: InstanceInfo, paths: list[str], values: list[Any]) -> None:
        """Set every pair in order; raise PartialSetError if any failed."""
        failures: list[PropertyError] = []
        for path, value in zip(paths, values):
            try:
                await self.set_property(info, path, value)
            except PropertyError as e:
                failures.append(e.with_context(path=path, instance=info.uuid))
            except EditorBridgeError as e:
                failures.append(CommitFailed(str(e), path=path, instance=info.uuid))
            else:
                metrics.record_property_write(True)
                continue
            metrics.record_property_write(False)
            logger.warning("Setting '%s' on %s failed: %s", path, info.uuid, failures[-1].message)

        if failures:
            raise PartialSetError(failures, instance=info.uuid)

    async def set_property(self, info: InstanceInfo, path: str, value: Any) -> None:
        node = resolve(info.graph, path)
        value = normalize(value, node.schema)
        await self.commit(info, path, node.schema, value)

    async def commit(self, info: InstanceInfo, path: str, schema: Schema, value: Any) -> None:
        if info.asset_backed:
            await self._commit_asset(info, path, value)
            return

        uuid = info.uuid
        if info.kind == KIND_SCENE_GLOBALS:
            path = f"_globals.{path}"
        elif info.kind == KIND_COMPONENT:
            uuid, path = await self._rebase_component(info, path)

        await self._commit_live(uuid, path, schema, value)

    async def _commit_asset(self, info: InstanceInfo, path: str, value: Any) -> None:
        importer_name = info.asset_info.get("importer")
        importer = self.registry.get(importer_name)
        if importer is None:
            raise ImporterNotHandled(f"No importer registered for '{importer_name}'")
        if not await importer.set_property(info.asset_info, path, value):
            raise ImporterNotHandled(f"Importer '{importer_name}' did not handle the property")

    async def _rebase_component(self, info: InstanceInfo, path: str) -> tuple[str, str]:
        """Components are written through their node's `__comps__` slot."""
        owner = unwrap(info.graph.get("node")) if "node" in info.graph else None
        node_uuid = owner.get("uuid") if isinstance(owner, Mapping) else None
        if not node_uuid:
            raise NotFound(f"Component {info.uuid} carries no owning node")

        node_dump = await self.editor.query_node(node_uuid)
        if not node_dump:
            raise NotFound(f"Parent node {node_uuid} for component {info.uuid} not found")

        idx = component_index(node_dump, info.uuid)
        if idx < 0:
            raise NotFound(f"Component {info.uuid} not listed in __comps__ of node {node_uuid}")
        return node_uuid, f"__comps__.{idx}.{path}"

    async def _commit_live(self, uuid: str, path: str, schema: Schema, value: Any) -> None:
        if isinstance(value, list) and schema.is_array:
            etd = schema.element_type_data
            element_schema = etd.schema if etd is not None else schema
            if element_schema.is_reference:
                value = await resolve_reference_list(value, element_schema, self.editor)
        elif schema.is_reference:
            value = await resolve_reference(value, schema, self.editor)

        await self.editor.set_property(uuid, path, {"value": value, "type": schema.type})
        await self.editor.snapshot()
        logger.debug("Set %s on %s", path, uuid)
