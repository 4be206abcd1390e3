def _payloads(received, name):
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


def _join(client, room_id, nickname):
    client.emit('join_room', {'roomId': room_id, 'nickname': nickname})


def _player_ids(received):
    info = _payloads(received, 'room_info')[-1]
    return {p['nickname']: p['id'] for p in info['players']}


def _seat_and_start(make_sio_client, room_id='ABCD'):
    alice = make_sio_client()
    bob = make_sio_client()
    _join(alice, room_id, 'Alice')
    _join(bob, room_id, 'Bob')
    alice.emit('ready', {'roomId': room_id})
    bob.emit('ready', {'roomId': room_id})
    return alice, bob


def test_socket_connect_and_join(sio_client):
    assert sio_client.is_connected()
    sio_client.get_received()

    _join(sio_client, 'ABCD', 'Alice')
    received = sio_client.get_received()
    info = _payloads(received, 'room_info')
    assert info and info[-1]['roomId'] == 'ABCD'
    assert info[-1]['status'] == 'waiting'
    assert [p['nickname'] for p in info[-1]['players']] == ['Alice']
    # Joining alone never deals
    assert not _payloads(received, 'game_started')


def test_join_requires_room_and_nickname(sio_client):
    sio_client.emit('join_room', {'roomId': 'ABCD'})
    errors = _payloads(sio_client.get_received(), 'error')
    assert errors == [{'message': 'roomId and nickname are required'}]


def test_second_join_notifies_first_player(make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    alice.get_received()

    _join(bob, 'ABCD', 'Bob')
    alice_events = alice.get_received()
    joined = _payloads(alice_events, 'player_joined')
    assert [j['nickname'] for j in joined] == ['Bob']
    assert _payloads(alice_events, 'room_info')[-1]['status'] == 'full'

    bob_events = bob.get_received()
    assert not _payloads(bob_events, 'player_joined')
    assert len(_payloads(bob_events, 'room_info')[-1]['players']) == 2


def test_full_room_rejects_third_player(make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    cara = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    _join(bob, 'ABCD', 'Bob')
    alice.get_received()
    bob.get_received()

    _join(cara, 'ABCD', 'Cara')
    assert _payloads(cara.get_received(), 'error') == [{'message': 'Room is full'}]
    # The failure is reported to the sender only
    assert not _payloads(alice.get_received(), 'error')
    assert not _payloads(bob.get_received(), 'error')


def test_ready_up_deals_private_secrets(flask_app, make_sio_client):
    alice, bob = _seat_and_start(make_sio_client)
    alice_events = alice.get_received()
    bob_events = bob.get_received()

    assert [r['nickname'] for r in _payloads(alice_events, 'player_ready')] == ['Bob']
    assert [r['nickname'] for r in _payloads(bob_events, 'player_ready')] == ['Alice']

    alice_start = _payloads(alice_events, 'game_started')
    bob_start = _payloads(bob_events, 'game_started')
    assert len(alice_start) == 1 and len(bob_start) == 1
    assert alice_start[0]['deck'] == bob_start[0]['deck']
    assert len(alice_start[0]['deck']) == 20

    ids = _player_ids(alice_events)
    room = flask_app.extensions['room_store'].get_room('ABCD')
    assert alice_start[0]['mySecret'] == room.players[ids['Alice']].secret_card
    assert bob_start[0]['mySecret'] == room.players[ids['Bob']].secret_card
    assert set(alice_start[0]) == {'roomId', 'deck', 'mySecret'}


def test_update_remaining_reaches_opponent_only(make_sio_client):
    alice, bob = _seat_and_start(make_sio_client)
    alice.get_received()
    bob.get_received()

    alice.emit('update_remaining', {'roomId': 'ABCD', 'remaining': 14})
    assert _payloads(bob.get_received(), 'update_remaining') == [{'from': 'Alice', 'remaining': 14}]
    assert not _payloads(alice.get_received(), 'update_remaining')


def test_stale_update_remaining_is_silent(sio_client):
    sio_client.emit('update_remaining', {'roomId': 'NOPE', 'remaining': 3})
    assert sio_client.get_received() == []


def test_voice_relayed_to_others(make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    _join(bob, 'ABCD', 'Bob')
    ids = _player_ids(alice.get_received())
    bob.get_received()

    bob.emit('voice', {'roomId': 'ABCD', 'data': 'base64-audio'})
    assert _payloads(alice.get_received(), 'voice') == [{'from': ids['Bob'], 'data': 'base64-audio'}]
    assert not _payloads(bob.get_received(), 'voice')


def test_guess_ends_game_for_everyone(flask_app, make_sio_client):
    alice, bob = _seat_and_start(make_sio_client)
    ids = _player_ids(alice.get_received())
    bob.get_received()
    room = flask_app.extensions['room_store'].get_room('ABCD')
    alice_secret = room.players[ids['Alice']].secret_card
    bob_secret = room.players[ids['Bob']].secret_card

    alice.emit('guess', {'roomId': 'ABCD', 'cardId': bob_secret})
    for events in (alice.get_received(), bob.get_received()):
        result = _payloads(events, 'result')
        assert len(result) == 1
        assert result[0]['winner'] == 'Alice'
        assert result[0]['guesser'] == 'Alice'
        assert result[0]['guessedCard'] == bob_secret
        assert result[0]['correctCard'] == [
            {'player': ids['Alice'], 'card': alice_secret},
            {'player': ids['Bob'], 'card': bob_secret},
        ]
    assert room.status.value == 'finished'


def test_guess_before_start_reports_error(make_sio_client):
    alice = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    alice.get_received()
    alice.emit('guess', {'roomId': 'ABCD', 'cardId': 'card_1'})
    errors = _payloads(alice.get_received(), 'error')
    assert errors == [{'message': 'No game in progress'}]


def test_disconnect_demotes_room(flask_app, make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    _join(bob, 'ABCD', 'Bob')
    alice.get_received()
    bob.get_received()

    alice.disconnect()
    bob_events = bob.get_received()
    gone = _payloads(bob_events, 'player_disconnected')
    assert [g['nickname'] for g in gone] == ['Alice']
    info = _payloads(bob_events, 'room_info')[-1]
    assert info['status'] == 'waiting'
    assert [p['nickname'] for p in info['players']] == ['Bob']

    store = flask_app.extensions['room_store']
    assert store.get_room('ABCD') is not None

    bob.disconnect()
    assert store.get_room('ABCD') is None


def test_leave_room_frees_seat(flask_app, make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    _join(alice, 'ABCD', 'Alice')
    _join(bob, 'ABCD', 'Bob')
    alice.get_received()
    bob.get_received()

    bob.emit('leave_room', {'roomId': 'ABCD'})
    bob_events = bob.get_received()
    assert _payloads(bob_events, 'left') == [{'roomId': 'ABCD'}]
    assert not _payloads(bob_events, 'player_disconnected')
    assert [g['nickname'] for g in _payloads(alice.get_received(), 'player_disconnected')] == ['Bob']

    cara = make_sio_client()
    _join(cara, 'ABCD', 'Cara')
    info = _payloads(cara.get_received(), 'room_info')[-1]
    assert [p['nickname'] for p in info['players']] == ['Alice', 'Cara']
    assert info['status'] == 'full'


def test_guess_without_card_keeps_game_running(flask_app, make_sio_client):
    alice, bob = _seat_and_start(make_sio_client)
    alice.get_received()
    bob.get_received()

    alice.emit('guess', {'roomId': 'ABCD'})
    alice.emit('guess', {'roomId': 'ABCD', 'cardId': 7})
    assert _payloads(alice.get_received(), 'error') == [
        {'message': 'cardId is required'},
        {'message': 'cardId is required'},
    ]
    assert not _payloads(bob.get_received(), 'result')
    room = flask_app.extensions['room_store'].get_room('ABCD')
    assert room.status.value == 'playing'
