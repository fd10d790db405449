import asyncio
from trade_indexer.sources.indexer.registry import ZERO_ADDRESS, PoolRegistry
from trade_indexer.tests.fakes import FACTORY, POOL, POOL_2, TOKEN, TOKEN_2, FakeRpc, pool_created_event


def assert_inverse(registry: PoolRegistry):
    for pool in registry.pools():
        assert registry.lookup_pool(registry.lookup_token(pool)) == pool
    for token in registry.tokens():
        assert registry.lookup_token(registry.lookup_pool(token)) == token


def test_lookups_are_case_insensitive():
    registry = PoolRegistry()
    assert registry.add(POOL.upper().replace("0X", "0x"), TOKEN)

    assert registry.lookup_token(POOL) == TOKEN
    assert registry.lookup_pool(TOKEN.upper().replace("0X", "0x")) == POOL
    assert registry.lookup_token("0x" + "12" * 20) is None


def test_first_writer_wins_and_tables_stay_inverse():
    registry = PoolRegistry()
    assert registry.add(POOL, TOKEN)
    assert not registry.add(POOL_2, TOKEN)        # token already mapped
    assert not registry.add(POOL, TOKEN_2)        # pool already mapped
    assert not registry.add(POOL, TOKEN)          # exact repeat

    assert len(registry) == 1
    assert registry.lookup_pool(TOKEN) == POOL
    assert registry.lookup_token(POOL_2) is None
    assert_inverse(registry)


def test_zero_pool_is_ignored():
    registry = PoolRegistry()
    assert not registry.add(ZERO_ADDRESS, TOKEN)
    assert len(registry) == 0


def test_observe_counts_only_new_pools():
    registry = PoolRegistry()
    added = registry.observe([
        pool_created_event(POOL, TOKEN),
        pool_created_event(POOL_2, TOKEN_2),
        pool_created_event(POOL, TOKEN),
    ])
    assert added == 2
    assert sorted(registry.pools()) == sorted([POOL, POOL_2])
    assert_inverse(registry)


def test_bulk_load_from_factory():
    rpc = FakeRpc()
    rpc.contract_values[("getAllTokens",)] = [TOKEN, TOKEN_2]
    rpc.contract_values[("getPool", TOKEN)] = POOL
    rpc.contract_values[("getPool", TOKEN_2)] = ZERO_ADDRESS

    registry = PoolRegistry()
    added = asyncio.run(registry.bulk_load(rpc, FACTORY))

    assert added == 1
    assert registry.lookup_pool(TOKEN) == POOL
    assert registry.lookup_pool(TOKEN_2) is None
