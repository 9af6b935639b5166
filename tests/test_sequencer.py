from concurrent.futures import ThreadPoolExecutor

from app.queue.sequencer import Sequencer


def test_sequencer_issues_strictly_increasing_values():
    sequencer = Sequencer()
    values = [sequencer.next() for _ in range(5)]
    assert values == [1, 2, 3, 4, 5]
    assert sequencer.last == 5


def test_sequencer_never_hands_out_duplicates_across_threads():
    sequencer = Sequencer(start=10)

    def draw(_):
        return [sequencer.next() for _ in range(200)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        batches = list(pool.map(draw, range(8)))

    values = [value for batch in batches for value in batch]
    assert len(values) == len(set(values)) == 1600
    assert min(values) == 10
    assert max(values) == 1609
    for batch in batches:
        assert batch == sorted(batch)
