from __future__ import annotations

"""Profiles and scalar preferences on top of a key/value store.

Every read tolerates absent or malformed data and falls back to defaults.
"""

from typing import List, Optional

from pydantic import ValidationError

from ..fretboard.tuning import DEFAULT_PROFILE, GuitarProfile
from ..logger import get_logger
from .schema import ACTIVE_PROFILE_KEY, PREFERENCES_KEY, PROFILES_KEY, Preferences
from .store import KeyValueStore, load_json, save_json

logger = get_logger(__name__)


class PreferenceStore:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # --- instrument profiles ---

    def profiles(self) -> List[GuitarProfile]:
        raw = load_json(self.store, PROFILES_KEY, default=None)
        if not isinstance(raw, list) or not raw:
            return [DEFAULT_PROFILE]
        out: List[GuitarProfile] = []
        for item in raw:
            try:
                out.append(GuitarProfile.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Dropping malformed guitar profile: {e.errors()[:1]}")
        return out or [DEFAULT_PROFILE]

    def save_profiles(self, profiles: List[GuitarProfile]) -> None:
        save_json(self.store, PROFILES_KEY, [p.model_dump() for p in profiles])

    def upsert_profile(self, profile: GuitarProfile) -> None:
        profiles = [p for p in self.profiles() if p.id != profile.id]
        profiles.append(profile)
        self.save_profiles(profiles)

    def active_profile_id(self) -> str:
        raw = load_json(self.store, ACTIVE_PROFILE_KEY, default=None)
        return raw if isinstance(raw, str) and raw else DEFAULT_PROFILE.id

    def set_active_profile(self, profile_id: str) -> None:
        save_json(self.store, ACTIVE_PROFILE_KEY, profile_id)

    def active_profile(self) -> GuitarProfile:
        """Active profile, or the first stored one if the id is stale."""
        wanted = self.active_profile_id()
        profiles = self.profiles()
        for p in profiles:
            if p.id == wanted:
                return p
        return profiles[0]

    # --- scalar preferences ---

    def preferences(self, default: Optional[Preferences] = None) -> Preferences:
        """Stored preferences, else ``default`` (or the model defaults)."""
        fallback = default or Preferences()
        raw = load_json(self.store, PREFERENCES_KEY, default=None)
        if not isinstance(raw, dict):
            return fallback
        try:
            return Preferences.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed preferences record")
            return fallback

    def save_preferences(self, prefs: Preferences) -> None:
        save_json(self.store, PREFERENCES_KEY, prefs.model_dump())

    def set_accidental_preference(self, style: str) -> None:
        prefs = self.preferences().model_dump()
        prefs["accidental_preference"] = style
        self.save_preferences(Preferences.model_validate(prefs))

    def set_adaptive(self, enabled: bool) -> None:
        prefs = self.preferences().model_dump()
        prefs["adaptive"] = bool(enabled)
        self.save_preferences(Preferences.model_validate(prefs))


def find_profile(profiles: List[GuitarProfile], profile_id: str) -> Optional[GuitarProfile]:
    return next((p for p in profiles if p.id == profile_id), None)
