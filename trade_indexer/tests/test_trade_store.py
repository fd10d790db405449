import asyncio
from trade_indexer.storage import trade_store
from trade_indexer.tests.fakes import POOL_2, TOKEN, TOKEN_2, make_record


def test_upsert_replaces_by_id(session_factory):
    record = make_record(10)
    with session_factory() as session:
        trade_store.bulk_upsert_records(session, [record, make_record(11)])
        trade_store.bulk_upsert_records(session, [record._replace(action="sell")])
        session.commit()

    with session_factory() as session:
        assert trade_store.count_records(session, []) == 2
        rows = trade_store.find_records(session, trade_store.build_filter(min_block=10))
        assert [r.block_number for r in rows] == [11, 10]
        assert rows[1] == record._replace(action="sell")


def test_checkpoint_is_monotonic(session_factory):
    with session_factory() as session:
        assert trade_store.load_checkpoint(session) == 0
        trade_store.upsert_checkpoint(session, 100)
        trade_store.upsert_checkpoint(session, 50)
        session.commit()
        assert trade_store.load_checkpoint(session) == 100
        trade_store.upsert_checkpoint(session, 150)
        session.commit()
        assert trade_store.load_checkpoint(session) == 150


def test_volume_sum_is_exact(session_factory):
    huge = 10**27 + 1
    with session_factory() as session:
        trade_store.bulk_upsert_records(session, [
            make_record(1, vtru=str(huge), timestamp=1_000),
            make_record(2, vtru=str(huge), timestamp=5_000),
            make_record(3, vtru=None, timestamp=9_000),
        ])
        session.commit()
        assert trade_store.sum_vtru_amount(session) == 2 * huge
        assert trade_store.sum_vtru_amount(session, since_ms=4_000) == huge


def test_sink_paging_and_filters(sink):
    records = [make_record(b) for b in range(1, 6)] + [make_record(9, pool=POOL_2, token=TOKEN_2)]

    async def scenario():
        await sink.save_batch(9, records)
        return (
            await sink.find_page(page=1, limit=2),
            await sink.find_page(page=3, limit=2),
            await sink.count(token=TOKEN.upper().replace("0X", "0x")),
            await sink.count(pool=POOL_2),
            await sink.count(min_block=4),
            await sink.load_checkpoint(),
        )

    first, third, by_token, by_pool, recent, checkpoint = asyncio.run(scenario())
    assert [r.block_number for r in first] == [9, 5]
    assert [r.block_number for r in third] == [2, 1]
    assert (by_token, by_pool, recent) == (5, 1, 3)
    assert checkpoint == 9


def test_sink_window_and_tail_queries(sink):
    records = [make_record(b, timestamp=b * 1000) for b in (10, 20, 30)]

    async def scenario():
        await sink.save_batch(30, records)
        return (
            await sink.find_since(20_000),
            await sink.records_after_block(10),
            await sink.latest_block_number(),
            await sink.total_volume(),
        )

    window, tail, latest, volume = asyncio.run(scenario())
    assert [r.block_number for r in window] == [30, 20]
    assert [r.block_number for r in tail] == [20, 30]
    assert latest == 30
    assert volume == 3000


def test_empty_store(sink):
    async def scenario():
        return await sink.latest_block_number(), await sink.total_volume(), await sink.find_page()

    assert asyncio.run(scenario()) == (0, 0, [])


def test_block_floor_of_zero_is_applied():
    assert len(trade_store.build_filter(min_block=0)) == 1
    assert trade_store.build_filter() == []
