from concurrent.futures import ThreadPoolExecutor

from ffhistory.api.models import User
from ffhistory.compute.chain import ChainCache, SeasonChainResolver, resolve_season_chain


def test_follows_backlinks_oldest_first(source):
    source.add_league("L21", "2021")
    source.add_league("L22", "2022", previous="L21")
    source.add_league("L23", "2023", previous="L22")
    assert resolve_season_chain(source, "L23") == ("L21", "L22", "L23")


def test_cycle_in_backlinks_terminates(source):
    source.add_league("A", "2022", previous="B")
    source.add_league("B", "2021", previous="A")
    chain = resolve_season_chain(source, "A")
    assert chain == ("B", "A")
    assert len(set(chain)) == len(chain)


def test_unreachable_hop_is_excluded(source):
    source.add_league("L23", "2023", previous="L22")
    source.add_league("L22", "2022", previous="GONE")
    assert resolve_season_chain(source, "L23") == ("L22", "L23")

    source.add_league("L22", "2022", previous="L21")
    source.add_league("L21", "2021")
    source.failing.add(("league", "L21"))
    assert resolve_season_chain(source, "L23") == ("L22", "L23")


def test_unreachable_seed_yields_seed_only(source):
    assert resolve_season_chain(source, "missing") == ("missing",)


def test_duplicate_season_keeps_league_nearest_seed(source):
    source.add_league("L23", "2023", previous="L22b")
    source.add_league("L22b", "2022", previous="L22a")
    source.add_league("L22a", "2022", previous="L21")
    source.add_league("L21", "2021")
    assert resolve_season_chain(source, "L23") == ("L21", "L22b", "L23")


def test_probes_one_future_season(source):
    source.add_league("L22", "2022")
    source.users["L22"] = [User("owner", "Commish", is_owner=True), User("x", "Other")]
    nxt = source.add_league("L23", "2023", previous="L22")
    unrelated = source.add_league("Z23", "2023", previous="Z22")
    source.user_leagues[("owner", "2023")] = [unrelated, nxt]
    assert resolve_season_chain(source, "L22") == ("L22", "L23")


def test_resolver_cache_is_idempotent(source):
    source.add_league("L21", "2021")
    source.add_league("L22", "2022", previous="L21")
    cache = ChainCache()
    resolver = SeasonChainResolver(source, cache)
    first = resolver.resolve("L22")
    calls = source.calls["league"]
    second = SeasonChainResolver(source, cache).resolve("L22")
    assert first == second == ("L21", "L22")
    assert source.calls["league"] == calls
    assert "L22" in cache and len(cache) == 1


def test_split_year_labels_still_order_oldest_first(source):
    source.add_league("A", "2021-22")
    source.add_league("B", "2022-23", previous="A")
    source.add_league("C", "2023-24", previous="B")
    assert resolve_season_chain(source, "C") == ("A", "B", "C")


def test_missing_labels_fall_back_to_link_order(source):
    source.add_league("A", "")
    source.add_league("B", "", previous="A")
    source.add_league("C", "", previous="B")
    assert resolve_season_chain(source, "C") == ("A", "B", "C")


def test_concurrent_resolves_share_one_cached_chain(source):
    source.add_league("L21", "2021")
    source.add_league("L22", "2022", previous="L21")
    resolver = SeasonChainResolver(source)
    with ThreadPoolExecutor(max_workers=4) as pool:
        chains = list(pool.map(resolver.resolve, ["L22"] * 8))
    assert all(chain is chains[0] for chain in chains)
    assert len(resolver.cache) == 1
