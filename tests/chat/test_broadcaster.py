from workhub.chat.broadcaster import Broadcaster, room_topic


def test_publish_reaches_only_subscribers_of_that_topic():
    hub = Broadcaster(queue_size=5)
    room_one = hub.subscribe(room_topic(1))
    room_two = hub.subscribe(room_topic(2))

    delivered = hub.publish(room_topic(1), {"type": "new_message", "id": 7})

    assert delivered == 1
    assert room_one.drain() == [{"type": "new_message", "id": 7}]
    assert room_two.drain() == []


def test_full_queue_drops_event_without_blocking():
    hub = Broadcaster(queue_size=1)
    sub = hub.subscribe("chat_room_1")

    assert hub.publish("chat_room_1", {"n": 1}) == 1
    assert hub.publish("chat_room_1", {"n": 2}) == 0

    assert sub.dropped == 1
    assert sub.drain() == [{"n": 1}]


def test_closed_subscription_is_removed_from_topic():
    hub = Broadcaster()
    with hub.subscribe("chat_room_3") as sub:
        assert hub.subscriber_count("chat_room_3") == 1

    assert sub.closed
    assert hub.subscriber_count("chat_room_3") == 0
    assert hub.publish("chat_room_3", {"n": 1}) == 0


def test_get_returns_none_on_timeout():
    sub = Broadcaster().subscribe("chat_room_4")

    assert sub.get(timeout=0) is None
