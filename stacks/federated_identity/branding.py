"""
Managed login branding configuration.

Branding settings form a nested tree (category -> component -> color mode
-> property). A deployment supplies an override tree that is merged over
the built-in defaults; assets are an ordered list supplied wholesale.
"""

import base64
import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..common.constants import DEFAULT_ASSET_COLOR_MODE
from ..common.exceptions import ConfigurationConflict, MissingConfiguration

logger = logging.getLogger(__name__)

SettingsTree = Dict[str, Any]

ASSETS_DIR = Path(__file__).parent / "assets"

DEFAULT_BRANDING_SETTINGS: SettingsTree = {
    "categories": {
        "form": {
            "languageSelector": {"enabled": True},
        },
        "global": {
            "colorSchemeMode": "LIGHT",
        },
    },
    "componentClasses": {
        "focusState": {
            "lightMode": {"borderColor": "0069d9ff"},
        },
        "input": {
            "lightMode": {
                "defaults": {},
                "placeholderColor": "6c757dff",
            },
        },
        "inputLabel": {
            "lightMode": {},
        },
        "link": {
            "lightMode": {
                "defaults": {"textColor": "1b6ec2ff"},
                "hover": {"textColor": "0069d9ff"},
            },
        },
    },
    "components": {
        "favicon": {
            "enabledTypes": ["ICO"],
        },
        "form": {
            "logo": {"enabled": True},
        },
        "pageBackground": {
            "image": {"enabled": False},
        },
        "pageText": {
            "lightMode": {
                "headingColor": "212529ff",
                "bodyColor": "212529ff",
                "descriptionColor": "212529ff",
            },
        },
        "primaryButton": {
            "lightMode": {
                "defaults": {"backgroundColor": "1b6ec2ff", "textColor": "ffffffff"},
                "hover": {"backgroundColor": "0069d9ff", "textColor": "ffffffff"},
            },
        },
        "secondaryButton": {
            "lightMode": {
                "defaults": {
                    "backgroundColor": "ffffffff",
                    "borderColor": "1b6ec2ff",
                    "textColor": "1b6ec2ff",
                },
                "hover": {
                    "backgroundColor": "f2f8fdff",
                    "borderColor": "0069d9ff",
                    "textColor": "0069d9ff",
                },
            },
        },
    },
}

# (category, extension, file name) of the bundled assets
DEFAULT_ASSET_FILES = (
    ("FORM_LOGO", "PNG", "FORM_LOGO.png"),
    ("FAVICON_ICO", "ICO", "FAVICON.ico"),
)


@dataclass(frozen=True)
class AssetDeclaration:
    """A binary branding asset. The payload is passed through untouched."""
    category: str
    color_mode: str
    extension: str
    payload: bytes

    @property
    def key(self) -> Tuple[str, str]:
        return (self.category, self.color_mode)

    def encoded(self) -> str:
        """Return the payload as base64 text, the form the branding API expects."""
        return base64.b64encode(self.payload).decode("ascii")

    def to_dict(self) -> Dict[str, str]:
        return {
            "category": self.category,
            "color_mode": self.color_mode,
            "extension": self.extension,
            "bytes": self.encoded(),
        }


@dataclass(frozen=True)
class BrandingConfiguration:
    """Merged settings tree plus the ordered asset list of one deployment."""
    settings: SettingsTree
    assets: Tuple[AssetDeclaration, ...]


def merge_settings(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> SettingsTree:
    """
    Deep-merge two settings trees, right-biased.

    Keys only in ``defaults`` are kept, keys only in ``overrides`` are
    added, and where both hold a subtree the merge recurses. At any other
    overlap the override value replaces the default wholesale, including a
    scalar replacing a subtree or the reverse. Neither input is modified.
    """
    merged = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_unique_assets(assets: Iterable[AssetDeclaration]) -> None:
    """
    Raises:
        ConfigurationConflict: If two assets share a (category, color mode) pair
    """
    seen = set()
    for asset in assets:
        if asset.key in seen:
            raise ConfigurationConflict(
                f"Duplicate branding asset for category '{asset.category}' "
                f"and color mode '{asset.color_mode}'",
                config_key="Branding.Assets"
            )
        seen.add(asset.key)


def _read_asset(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise MissingConfiguration(
            str(path),
            message=f"Branding asset file '{path}' could not be read: {e}"
        ) from e


def default_asset_declarations() -> List[AssetDeclaration]:
    """Load the asset files bundled with the package."""
    return [
        AssetDeclaration(
            category=category,
            color_mode=DEFAULT_ASSET_COLOR_MODE,
            extension=extension,
            payload=_read_asset(ASSETS_DIR / file_name),
        )
        for category, extension, file_name in DEFAULT_ASSET_FILES
    ]


def load_asset_declarations(entries: Iterable[Mapping[str, Any]],
                            base_dir: Union[str, Path] = ".") -> List[AssetDeclaration]:
    """
    Build asset declarations from configuration entries.

    Each entry needs ``Category``, ``ColorMode``, ``Extension`` and ``Path``;
    a relative ``Path`` is resolved against ``base_dir``.

    Raises:
        MissingConfiguration: If an entry lacks a key or its file is unreadable
    """
    declarations = []
    for index, entry in enumerate(entries):
        for key in ("Category", "ColorMode", "Extension", "Path"):
            if not entry.get(key):
                raise MissingConfiguration(f"Branding.Assets[{index}].{key}")

        path = Path(entry["Path"])
        if not path.is_absolute():
            path = Path(base_dir) / path

        declarations.append(AssetDeclaration(
            category=entry["Category"],
            color_mode=entry["ColorMode"],
            extension=entry["Extension"],
            payload=_read_asset(path),
        ))
    return declarations


def merge_branding(overrides: Optional[Mapping[str, Any]] = None,
                   assets: Optional[Iterable[AssetDeclaration]] = None,
                   defaults: Mapping[str, Any] = DEFAULT_BRANDING_SETTINGS) -> BrandingConfiguration:
    """
    Produce the branding configuration for one deployment.

    Args:
        overrides: Per-deployment settings layer; empty or None keeps the defaults
        assets: Asset list for this deployment; None selects the bundled assets
        defaults: Base settings tree

    Raises:
        ConfigurationConflict: If the asset list holds a duplicate pair
    """
    asset_list = tuple(default_asset_declarations() if assets is None else assets)
    validate_unique_assets(asset_list)

    settings = merge_settings(defaults, overrides or {})
    logger.debug(f"Merged branding settings with {len(asset_list)} asset(s)")
    return BrandingConfiguration(settings=settings, assets=asset_list)
