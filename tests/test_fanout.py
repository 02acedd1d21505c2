import asyncio

from hardhat.services.fanout import run_all


def test_outcomes_keep_input_order():
    async def worker(index, delay):
        await asyncio.sleep(delay)
        return index * 10

    outcomes = asyncio.run(run_all([0.03, 0.0, 0.01], worker, max_concurrency=3))

    assert [o.index for o in outcomes] == [0, 1, 2]
    assert [o.value for o in outcomes] == [0, 10, 20]


def test_failure_does_not_cancel_siblings():
    finished = []

    async def worker(index, item):
        await asyncio.sleep(0.01 * index)
        if item == "bad":
            raise ValueError("unreadable image")
        finished.append(index)
        return item

    outcomes = asyncio.run(run_all(["a", "bad", "c", "d"], worker, max_concurrency=4))

    assert sorted(finished) == [0, 2, 3]
    assert [o.success for o in outcomes] == [True, False, True, True]
    assert outcomes[1].error_message == "unreadable image"
    assert outcomes[1].value is None


def test_concurrency_is_bounded():
    state = {"running": 0, "peak": 0}

    async def worker(index, item):
        state["running"] += 1
        state["peak"] = max(state["peak"], state["running"])
        await asyncio.sleep(0.01)
        state["running"] -= 1
        return item

    outcomes = asyncio.run(run_all(list(range(10)), worker, max_concurrency=2))

    assert state["peak"] == 2
    assert all(o.success for o in outcomes)


def test_empty_input():
    async def worker(index, item):
        return item

    assert asyncio.run(run_all([], worker)) == []
