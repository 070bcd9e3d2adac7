"""Importer registry: one capability per asset category."""

from types import MappingProxyType

from .base import AssetImporter
from .directory import DirectoryImporter
from .image import ImageImporter
from .material import MaterialImporter
from .model import FbxImporter, GltfImporter
from .physics_material import PhysicsMaterialImporter
from .prefab import PrefabImporter
from .project_settings import ProjectSettingsImporter
from .script import ScriptImporter
from .sprite_frame import SpriteFrameImporter
from .texture import AutoAtlasImporter, ErpTextureCubeImporter, RenderTextureImporter, TextureImporter

IMPORTER_CLASSES = (
    ProjectSettingsImporter,
    MaterialImporter,
    ScriptImporter,
    PrefabImporter,
    ImageImporter,
    TextureImporter,
    SpriteFrameImporter,
    ErpTextureCubeImporter,
    RenderTextureImporter,
    PhysicsMaterialImporter,
    FbxImporter,
    GltfImporter,
    DirectoryImporter,
    AutoAtlasImporter,
)


def build_registry(editor) -> MappingProxyType:
    """Instantiate every importer against `editor`; the result is read-only."""
    return MappingProxyType({cls.name: cls(editor) for cls in IMPORTER_CLASSES})


__all__ = ["AssetImporter", "IMPORTER_CLASSES", "build_registry"]
