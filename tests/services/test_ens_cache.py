"""
Tests for the address -> ENS resolution cache.
"""

from walletlens.services.ens_cache import ResolutionCache
from walletlens.types.identity import IdentityRecord, ResolutionState

ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


class TestNames:

    def test_keys_are_case_insensitive(self):
        cache = ResolutionCache()
        cache.put_name(ADDRESS, "vitalik.eth")

        assert cache.get_name(ADDRESS.lower()) == "vitalik.eth"
        assert cache.get_name(ADDRESS.upper().replace("0X", "0x")) == "vitalik.eth"

    def test_negative_result_is_cached(self):
        cache = ResolutionCache()
        assert cache.has_name(ADDRESS) is False

        cache.put_name(ADDRESS, None)

        assert cache.has_name(ADDRESS) is True
        assert cache.get_name(ADDRESS) is None


class TestProfiles:

    def test_mark_pending_stores_placeholder(self):
        cache = ResolutionCache()

        placeholder = cache.mark_pending(ADDRESS)

        assert placeholder.state == ResolutionState.PENDING
        assert placeholder.loading is True
        assert cache.get_profile(ADDRESS) == placeholder

    def test_put_replaces_placeholder(self):
        cache = ResolutionCache()
        cache.mark_pending(ADDRESS)

        cache.put_profile(ADDRESS, IdentityRecord(name="vitalik.eth"))

        assert cache.get_profile(ADDRESS).loading is False
        assert cache.get_profile(ADDRESS).name == "vitalik.eth"

    def test_discard_pending_only_drops_placeholder(self):
        cache = ResolutionCache()
        cache.mark_pending(ADDRESS)

        cache.discard_pending(ADDRESS.lower())

        assert cache.get_profile(ADDRESS) is None

        cache.put_profile(ADDRESS, IdentityRecord(name="vitalik.eth"))
        cache.discard_pending(ADDRESS)

        assert cache.get_profile(ADDRESS).name == "vitalik.eth"


class TestMaintenance:

    def test_flush_clears_both_maps(self):
        cache = ResolutionCache()
        cache.put_name(ADDRESS, "vitalik.eth")
        cache.put_profile(ADDRESS, IdentityRecord(name="vitalik.eth"))

        cache.flush()

        assert cache.has_name(ADDRESS) is False
        assert cache.get_profile(ADDRESS) is None

    def test_stats(self):
        cache = ResolutionCache()
        cache.put_name(ADDRESS, "vitalik.eth")
        cache.put_name("0x" + "ab" * 20, None)
        cache.put_profile(ADDRESS, IdentityRecord(name="vitalik.eth"))

        stats = cache.stats()

        assert stats["names"]["size"] == 2
        assert ADDRESS.lower() in stats["names"]["entries"]
        assert stats["profiles"] == {"size": 1, "entries": [ADDRESS.lower()]}
