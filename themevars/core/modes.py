"""Light/Dark mode setup for target collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from themevars.core.host import VariableCollection

logger = logging.getLogger(__name__)

LIGHT_MODE_NAME = "Light"
DARK_MODE_NAME = "Dark"


@dataclass(frozen=True, slots=True)
class ModeIds:
    light: str
    dark: str


def setup_collection_modes(collection: VariableCollection) -> ModeIds:
    """Ensure ``collection`` has a Light and a Dark mode and return their ids.

    A single-mode collection gets its mode renamed to Light and a Dark mode
    added. Otherwise modes are matched by name (``light`` or ``default`` /
    ``dark``, case-insensitive); a missing Dark mode is added and the default
    mode is renamed to Light when it ends up serving as the light mode.
    """
    light_id = collection.default_mode_id
    dark_id = ""

    if len(collection.modes) == 1:
        logger.info("renaming default mode of %r to Light and adding Dark", collection.name)
        collection.rename_mode(light_id, LIGHT_MODE_NAME)
        dark_id = collection.add_mode(DARK_MODE_NAME)
        return ModeIds(light=light_id, dark=dark_id)

    for mode in list(collection.modes):
        name = mode.name.lower()
        if "light" in name or name == "default":
            light_id = mode.mode_id
        elif "dark" in name:
            dark_id = mode.mode_id

    if light_id == dark_id:
        # The default mode is the dark one; use the first other mode as light.
        light_id = next(m.mode_id for m in collection.modes if m.mode_id != dark_id)

    if not dark_id:
        logger.info("adding Dark mode to %r", collection.name)
        dark_id = collection.add_mode(DARK_MODE_NAME)

    if light_id == collection.default_mode_id:
        default_mode = collection.mode(light_id)
        if default_mode is not None and default_mode.name.lower() != "light":
            logger.info("renaming mode %r of %r to Light", default_mode.name, collection.name)
            collection.rename_mode(light_id, LIGHT_MODE_NAME)

    return ModeIds(light=light_id, dark=dark_id)
