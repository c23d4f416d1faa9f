def test_lock_is_exclusive_per_user(lock_service):
    assert lock_service.acquire_checkout_lock(1, "a", 30)
    assert not lock_service.acquire_checkout_lock(1, "b", 30)
    assert lock_service.acquire_checkout_lock(2, "c", 30)


def test_only_owner_releases_lock(lock_service):
    lock_service.acquire_checkout_lock(1, "owner", 30)

    assert not lock_service.release_checkout_lock(1, "intruder")
    assert not lock_service.acquire_checkout_lock(1, "next", 30)

    assert lock_service.release_checkout_lock(1, "owner")
    assert lock_service.acquire_checkout_lock(1, "next", 30)


def test_lock_expires(lock_service):
    lock_service.acquire_checkout_lock(1, "owner", 30)

    assert 0 < lock_service.redis.ttl("checkout:1:lock") <= 30
