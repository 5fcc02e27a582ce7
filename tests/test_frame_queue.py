import threading

import pytest

from freikino.frame_queue import SpscQueue


def test_capacity_is_one_less_than_slots():
    assert SpscQueue(16).capacity() == 15


def test_fills_up_to_capacity():
    q = SpscQueue(8)
    pushed = [q.try_push(i) for i in range(q.capacity())]
    assert all(pushed)
    assert len(q) == q.capacity()
    assert q.try_push(99) is False


def test_fifo_order():
    q = SpscQueue(8)
    items = ["a", "b", "c", "d"]
    for item in items:
        assert q.try_push(item)
    popped = [q.try_pop() for _ in items]
    assert popped == items
    assert q.empty()


def test_pop_on_empty_returns_none():
    q = SpscQueue(4)
    assert q.try_pop() is None
    assert q.empty()
    assert len(q) == 0


def test_wraps_around():
    q = SpscQueue(4)
    received = []
    for value in range(20):
        assert q.try_push(value)
        assert q.try_push(value + 100)
        assert len(q) == 2
        received.append(q.try_pop())
        received.append(q.try_pop())
    assert received == [v for value in range(20) for v in (value, value + 100)]
    assert q.empty()


@pytest.mark.parametrize("slots", [0, 1, 3, 12])
def test_invalid_slot_counts(slots):
    with pytest.raises(ValueError):
        SpscQueue(slots)


def test_none_cannot_be_pushed():
    q = SpscQueue(4)
    with pytest.raises(ValueError):
        q.try_push(None)


def test_producer_consumer_threads_preserve_order():
    q = SpscQueue(16)
    total = 2000
    received = []

    def produce():
        for value in range(total):
            while not q.try_push(value):
                pass

    producer = threading.Thread(target=produce)
    producer.start()
    while len(received) < total:
        value = q.try_pop()
        if value is not None:
            received.append(value)
    producer.join()
    assert received == list(range(total))