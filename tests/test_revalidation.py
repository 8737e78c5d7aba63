import threading

from app.core.revalidation import InvalidationBus, RenderCache, ViewInvalidated


def test_invalidating_a_post_evicts_every_viewer():
    cache = RenderCache()
    cache.set("/post/p1", "u1", "card-u1")
    cache.set("/post/p1", None, "card-anon")
    cache.set("/post/p2", "u1", "other")

    cache.invalidate(ViewInvalidated("/post/p1"))

    assert cache.get("/post/p1", "u1") is None
    assert cache.get("/post/p1", None) is None
    assert cache.get("/post/p2", "u1") == "other"


def test_feed_invalidation_clears_everything():
    cache = RenderCache()
    cache.set("/post/p1", "u1", "a")
    cache.set("/post/p2", "u2", "b")

    cache.invalidate(ViewInvalidated("/"))

    assert len(cache) == 0


def test_cache_evicts_least_recently_used():
    cache = RenderCache(max_size=2)
    cache.set("/post/a", None, 1)
    cache.set("/post/b", None, 2)
    cache.get("/post/a", None)
    cache.set("/post/c", None, 3)

    assert cache.get("/post/b", None) is None
    assert cache.get("/post/a", None) == 1
    assert cache.get("/post/c", None) == 3


def test_bus_keeps_delivering_when_a_consumer_fails():
    bus = InvalidationBus()
    received = []

    def broken(event):
        raise RuntimeError("consumer down")

    bus.subscribe(broken)
    bus.subscribe(lambda event: received.append(event.path))

    bus.publish(ViewInvalidated("/post/p1"))

    assert received == ["/post/p1"]

    bus.unsubscribe(broken)
    bus.publish(ViewInvalidated("/"))
    assert received == ["/post/p1", "/"]


def test_cache_survives_concurrent_readers_and_invalidations():
    cache = RenderCache(max_size=32)
    errors = []

    def reader(viewer):
        try:
            for i in range(500):
                cache.set(f"/post/{i % 8}", viewer, i)
                cache.get(f"/post/{(i + 3) % 8}", viewer)
        except Exception as e:
            errors.append(e)

    def invalidator():
        try:
            for i in range(500):
                cache.invalidate(ViewInvalidated("/" if i % 50 == 0 else f"/post/{i % 8}"))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=reader, args=(f"u{n}",)) for n in range(4)]
    threads.append(threading.Thread(target=invalidator))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache) <= 32
