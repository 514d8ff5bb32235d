import pytest

from errors import InvalidConfiguration
from optimizer import AllocationBook, OptimizationRun, OptimizationState
from seeds import seed_allocations


def make_run(step=2.0):
    return OptimizationRun(AllocationBook(seed_allocations()), step=step)


def test_fifty_ticks_reach_settling_then_commit_targets():
    run = make_run(step=2)
    targets = {a.symbol: a.target_allocation for a in run.book.snapshot()}
    assert run.start()
    for _ in range(50):
        run.tick()
    assert run.progress == 100
    assert run.state is OptimizationState.SETTLING

    assert run.settle()
    assert {a.symbol: a.current_allocation for a in run.book.snapshot()} == targets
    assert run.progress == 0
    assert run.state is OptimizationState.IDLE


def test_progress_monotonic_while_running():
    run = make_run(step=3)
    run.start()
    seen = [run.progress]
    while run.tick():
        seen.append(run.progress)
    seen.append(run.progress)
    assert seen == sorted(seen)
    assert seen[-1] == 100


def test_double_start_commits_once():
    run = make_run()
    assert run.start()
    assert not run.start()
    while run.tick():
        pass
    assert not run.start()  # still settling
    assert run.settle()
    assert not run.settle()
    assert run.commits == 1


def test_no_commit_before_completion():
    run = make_run()
    before = run.book.snapshot()
    assert not run.settle()
    run.start()
    run.tick()
    assert not run.settle()
    assert run.book.snapshot() == before
    assert run.commits == 0


def test_reset_abandons_run():
    run = make_run()
    run.start()
    run.tick()
    run.reset()
    assert run.state is OptimizationState.IDLE
    assert run.progress == 0
    assert run.start()


def test_snapshot_shape():
    run = make_run()
    run.start()
    snap = run.snapshot()
    assert snap.state == "RUNNING"
    assert snap.running is True
    assert snap.commits == 0


def test_invalid_step_and_empty_book():
    with pytest.raises(InvalidConfiguration):
        make_run(step=0)
    with pytest.raises(InvalidConfiguration):
        AllocationBook([])
