from almanac.services.events import EventChannel


def test_signal_reaches_subscribers_of_that_event_only():
    channel = EventChannel()
    seen = []
    channel.on_signal("pest-detected", lambda name, payload: seen.append((name, payload)))
    channel.on_signal("frost", lambda name, payload: seen.append(("wrong", payload)))

    assert channel.signal("pest-detected", {"pest": "Aphids"}) == 1
    assert seen == [("pest-detected", {"pest": "Aphids"})]


def test_unsubscribe_stops_delivery():
    channel = EventChannel()
    seen = []
    unsubscribe = channel.on_signal("pest-detected", lambda name, payload: seen.append(payload))
    unsubscribe()
    unsubscribe()
    assert channel.signal("pest-detected", {"pest": "Slugs"}) == 0
    assert seen == []


def test_signal_without_subscribers_is_a_no_op():
    assert EventChannel().signal("anything") == 0


def test_failing_handler_does_not_starve_the_rest(caplog):
    channel = EventChannel()
    seen = []

    def broken(name, payload):
        raise RuntimeError("boom")

    channel.on_signal("pest-detected", broken)
    channel.on_signal("pest-detected", lambda name, payload: seen.append(payload))

    assert channel.signal("pest-detected", {"pest": "Aphids"}) == 2
    assert seen == [{"pest": "Aphids"}]
    assert "event_handler_failed" in caplog.text
