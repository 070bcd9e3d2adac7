"""Synthetic filter/wrap mode fields shared by the texture family.

Texture meta stores sampler state as separate min/mag/mip filters and S/T
wrap modes. The graph exposes one preset enum for each; a preset that
matches no stored combination reads as "Advanced" and the raw fields are
shown next to it.
"""

from __future__ import annotations

from typing import Any

from .base import choices, enum_prop, prop

FILTER_MODES = {
    "Nearest (None)": {"minfilter": "nearest", "magfilter": "nearest", "mipfilter": "none"},
    "Bilinear": {"minfilter": "linear", "magfilter": "linear", "mipfilter": "none"},
    "Bilinear with Mipmaps": {"minfilter": "linear", "magfilter": "linear", "mipfilter": "nearest"},
    "Trilinear with Mipmaps": {"minfilter": "linear", "magfilter": "linear", "mipfilter": "linear"},
}

WRAP_MODES = {
    "Repeat": {"wrapModeS": "repeat", "wrapModeT": "repeat"},
    "Clamp": {"wrapModeS": "clamp-to-edge", "wrapModeT": "clamp-to-edge"},
    "Mirror": {"wrapModeS": "mirrored-repeat", "wrapModeT": "mirrored-repeat"},
}

ADVANCED = "Advanced"


def _preset(user_data: dict, presets: dict) -> str:
    for mode, settings in presets.items():
        if all(user_data.get(key) == val for key, val in settings.items()):
            return mode
    return ADVANCED


def apply_texture_properties(user_data: dict, path: str, value: Any) -> bool:
    """Reconcile a preset or mipmap toggle back into the stored fields."""
    if path in ("filterMode", "wrapMode") and value == ADVANCED:
        # keeps the stored fields; they become editable individually
        return True
    if path == "filterMode" and value in FILTER_MODES:
        user_data.update(FILTER_MODES[value])
        return True
    if path == "wrapMode" and value in WRAP_MODES:
        user_data.update(WRAP_MODES[value])
        return True
    if path == "generateMipmaps" and isinstance(value, bool):
        if not value:
            user_data["mipfilter"] = "none"
        elif user_data.get("mipfilter", "none") == "none":
            user_data["mipfilter"] = "nearest"
        return True
    return False


def texture_properties(user_data: dict) -> dict:
    """filterMode / wrapMode presets plus the raw fields for "Advanced"."""
    fields = {}

    filter_mode = _preset(user_data, FILTER_MODES)
    fields["filterMode"] = enum_prop(filter_mode, choices(*FILTER_MODES, ADVANCED), "Filter Mode")
    if filter_mode == ADVANCED:
        fields["minfilter"] = enum_prop(user_data.get("minfilter"), choices("nearest", "linear"), "Min Filter")
        fields["magfilter"] = enum_prop(user_data.get("magfilter"), choices("nearest", "linear"), "Mag Filter")
        fields["mipfilter"] = enum_prop(user_data.get("mipfilter"), choices("none", "nearest", "linear"), "Mip Filter")

    wrap_mode = _preset(user_data, WRAP_MODES)
    fields["wrapMode"] = enum_prop(wrap_mode, choices(*WRAP_MODES, ADVANCED), "Wrap Mode")
    if wrap_mode == ADVANCED:
        wrap_choices = choices("repeat", "clamp-to-edge", "mirrored-repeat")
        fields["wrapModeS"] = enum_prop(user_data.get("wrapModeS"), wrap_choices, "Wrap Mode S")
        fields["wrapModeT"] = enum_prop(user_data.get("wrapModeT"), wrap_choices, "Wrap Mode T")

    fields["anisotropy"] = prop(user_data.get("anisotropy"), "Number", "Anisotropy")
    return fields


def generate_mipmaps(user_data: dict) -> dict:
    return prop(user_data.get("mipfilter") != "none", "Boolean", "Generate Mipmaps")
