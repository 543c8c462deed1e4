from asgiref.sync import async_to_sync

from apps.board.presence import PresenceRegistry


def test_add_and_remove_connections():
    presence = PresenceRegistry()

    async def scenario():
        await presence.add(1, 'chan-a')
        await presence.add(1, 'chan-a')
        await presence.add(1, 'chan-b')
        await presence.add(2, 'chan-c')
        snapshot = (await presence.connections_of(1), await presence.online_users())

        await presence.remove(1, 'chan-a')
        still_online = await presence.is_online(1)
        await presence.remove(1, 'chan-b')
        return snapshot, still_online, await presence.is_online(1), await presence.online_users()

    snapshot, still_online, online_after, users = async_to_sync(scenario)()
    assert snapshot == ({'chan-a', 'chan-b'}, {1, 2})
    assert still_online is True
    assert online_after is False
    assert users == {2}


def test_remove_unknown_is_a_no_op():
    presence = PresenceRegistry()

    async def scenario():
        await presence.remove(42, 'nothing')
        return await presence.online_users()

    assert async_to_sync(scenario)() == set()


def test_connections_of_returns_a_copy():
    presence = PresenceRegistry()

    async def scenario():
        await presence.add(1, 'chan-a')
        connections = await presence.connections_of(1)
        connections.add('intruder')
        return await presence.connections_of(1)

    assert async_to_sync(scenario)() == {'chan-a'}


def test_clear():
    presence = PresenceRegistry()

    async def scenario():
        await presence.add(1, 'chan-a')
        await presence.clear()
        return await presence.is_online(1)

    assert async_to_sync(scenario)() is False
