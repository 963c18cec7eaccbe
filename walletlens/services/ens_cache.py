from typing import Dict, List, Optional

from ..types.identity import IdentityRecord


class ResolutionCache:
    """Process-lifetime memo of address -> ENS name and address -> profile.

    Keys are lowercased addresses. Entries never expire; ``flush`` is the only
    way to drop them. There is no lock: two lookups that both miss will both
    hit the network and overwrite each other with the same answer.
    """

    def __init__(self):
        self._names: Dict[str, Optional[str]] = {}
        self._profiles: Dict[str, IdentityRecord] = {}

    @staticmethod
    def _key(address: str) -> str:
        return address.lower()

    def has_name(self, address: str) -> bool:
        return self._key(address) in self._names

    def get_name(self, address: str) -> Optional[str]:
        return self._names.get(self._key(address))

    def put_name(self, address: str, name: Optional[str]) -> None:
        self._names[self._key(address)] = name

    def get_profile(self, address: str) -> Optional[IdentityRecord]:
        return self._profiles.get(self._key(address))

    def put_profile(self, address: str, profile: IdentityRecord) -> None:
        self._profiles[self._key(address)] = profile

    def mark_pending(self, address: str) -> IdentityRecord:
        """Record that a profile lookup for ``address`` is in flight."""
        placeholder = IdentityRecord.pending()
        self._profiles[self._key(address)] = placeholder
        return placeholder

    def discard_pending(self, address: str) -> None:
        """Forget an in-flight placeholder; terminal records are left alone."""
        key = self._key(address)
        entry = self._profiles.get(key)
        if entry is not None and entry.loading:
            del self._profiles[key]

    def flush(self) -> None:
        self._names.clear()
        self._profiles.clear()

    def stats(self) -> Dict[str, Dict[str, object]]:
        names: List[str] = list(self._names.keys())
        profiles: List[str] = list(self._profiles.keys())
        return {
            "names": {"size": len(names), "entries": names},
            "profiles": {"size": len(profiles), "entries": profiles},
        }
