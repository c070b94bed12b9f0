from portfolio_tracker.application.services import SnapshotStream


def test_replays_latest_value_to_late_subscribers():
    stream = SnapshotStream(('a',))
    stream.publish(('a', 'b'))

    received = []
    stream.subscribe(received.append)

    assert received == [('a', 'b')]
    assert stream.value == ('a', 'b')


def test_failing_subscriber_does_not_block_others():
    stream = SnapshotStream(0)
    received = []

    def broken(value):
        raise RuntimeError("subscriber bug")

    stream.subscribe(broken)
    stream.subscribe(received.append)
    stream.publish(1)

    assert received == [0, 1]


def test_unsubscribe_is_idempotent():
    stream = SnapshotStream(0)
    received = []
    unsubscribe = stream.subscribe(received.append)
    assert stream.subscriber_count == 1

    unsubscribe()
    unsubscribe()
    stream.publish(5)

    assert stream.subscriber_count == 0
    assert received == [0]
