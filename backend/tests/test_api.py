from conftest import fire_next_tick


def _create(client, player_id):
    res = client.post('/api/games', json={'player_id': player_id})
    assert res.status_code == 201
    return res.get_json()


def test_index_and_player_id(client):
    assert client.get('/').status_code == 200
    res = client.post('/api/players')
    assert res.status_code == 201
    assert len(res.get_json()['player_id']) == 10


def test_create_game(client, player_ids):
    data = _create(client, player_ids[0])
    assert len(data['join_code']) == 4
    assert data['join_code'].isalpha() and data['join_code'].isupper()
    game = client.get(f"/api/games/{data['game_id']}").get_json()
    assert game['started'] is False
    assert game['phase'] == 'lobby'
    # Fixture pool has 4 questions, fewer than the default of 100
    assert game['rounds_remaining'] == 4
    assert game['seconds_per_question'] == 10
    assert game['players'] == {player_ids[0]: {'name': ''}}
    assert game['finished_rounds'] == []


def test_create_requires_player_id(client):
    res = client.post('/api/games', json={})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'validation'


def test_non_object_body_is_rejected(client, player_ids):
    gid = _create(client, player_ids[0])['game_id']
    for method, url in (('post', '/api/games'), ('post', '/api/games/join'),
                        ('post', f'/api/games/{gid}/leave'), ('patch', f'/api/games/{gid}/settings'),
                        ('post', f'/api/games/{gid}/guess')):
        for body in ([1, 2], 7, 'player'):
            res = getattr(client, method)(url, json=body)
            assert res.status_code == 400, (url, body)
            assert res.get_json() == {'error': 'Request body must be a JSON object', 'kind': 'validation'}
    game = client.get(f'/api/games/{gid}').get_json()
    assert list(game['players']) == [player_ids[0]]


def test_get_missing_game_is_null(client):
    res = client.get('/api/games/999')
    assert res.status_code == 200
    assert res.get_json() is None
    assert client.get('/api/games/999/round').get_json() is None


def test_join_is_idempotent(client, player_ids):
    host, guest = player_ids[0], player_ids[1]
    data = _create(client, host)
    res = client.post('/api/games/join', json={'join_code': data['join_code'].lower(), 'player_id': guest})
    assert res.status_code == 200
    assert res.get_json()['game_id'] == data['game_id']

    client.patch(f"/api/games/{data['game_id']}/settings",
                 json={'player_name': {'player_id': guest, 'name': 'Guest'}})
    again = client.post('/api/games/join', json={'join_code': data['join_code'], 'player_id': guest})
    assert again.get_json()['game_id'] == data['game_id']

    players = client.get(f"/api/games/{data['game_id']}").get_json()['players']
    assert players == {host: {'name': ''}, guest: {'name': 'Guest'}}


def test_client_minted_player_ids_are_accepted(client):
    data = _create(client, 'browser-7f3a')
    res = client.post('/api/games/join', json={'join_code': data['join_code'], 'player_id': 'x' * 64})
    assert res.status_code == 200
    players = client.get(f"/api/games/{data['game_id']}").get_json()['players']
    assert list(players) == ['browser-7f3a', 'x' * 64]

    res = client.post('/api/games/join', json={'join_code': data['join_code'], 'player_id': 'x' * 65})
    assert res.status_code == 400


def test_join_errors(client, player_ids):
    res = client.post('/api/games/join', json={'join_code': 'ZZZZ', 'player_id': player_ids[0]})
    assert res.status_code == 404
    assert res.get_json()['kind'] == 'not_found'
    res = client.post('/api/games/join', json={'join_code': 'AB1', 'player_id': player_ids[0]})
    assert res.status_code == 400


def test_leave_game(client, player_ids):
    host, guest = player_ids[0], player_ids[1]
    data = _create(client, host)
    client.post('/api/games/join', json={'join_code': data['join_code'], 'player_id': guest})
    res = client.post(f"/api/games/{data['game_id']}/leave", json={'player_id': guest})
    assert res.get_json() == {'game_id': data['game_id']}
    # Leaving twice is a no-op
    assert client.post(f"/api/games/{data['game_id']}/leave", json={'player_id': guest}).status_code == 200
    players = client.get(f"/api/games/{data['game_id']}").get_json()['players']
    assert list(players) == [host]
    assert client.post('/api/games/999/leave', json={'player_id': guest}).status_code == 404


def test_update_settings_validation(client, player_ids):
    gid = _create(client, player_ids[0])['game_id']
    url = f'/api/games/{gid}/settings'
    assert client.patch(url, json={}).get_json() == {'ok': True}
    assert client.patch(url, json={'rounds_remaining': 2, 'seconds_per_question': 5}).status_code == 200

    for bad in ({'rounds_remaining': 0}, {'rounds_remaining': 5}, {'rounds_remaining': 1.5},
                {'seconds_per_question': 0}, {'seconds_per_question': 61}, {'seconds_per_question': 'ten'},
                {'player_name': {'player_id': 'p' * 65, 'name': 'x'}},
                {'player_name': {'player_id': '  ', 'name': 'x'}}):
        res = client.patch(url, json=bad)
        assert res.status_code == 400, bad
        assert res.get_json()['kind'] == 'validation'

    # A bad field rejects the whole request
    client.patch(url, json={'rounds_remaining': 3, 'seconds_per_question': 99})
    game = client.get(f'/api/games/{gid}').get_json()
    assert game['rounds_remaining'] == 2
    assert game['seconds_per_question'] == 5


def test_settings_after_start_rejected(client, player_ids):
    gid = _create(client, player_ids[0])['game_id']
    client.patch(f'/api/games/{gid}/settings', json={'rounds_remaining': 2, 'seconds_per_question': 7})
    assert client.post(f'/api/games/{gid}/start').get_json() == {'ok': True}

    res = client.patch(f'/api/games/{gid}/settings', json={'rounds_remaining': 3, 'seconds_per_question': 9})
    assert res.status_code == 409
    assert res.get_json()['kind'] == 'precondition'
    assert 'cannot update settings after start' in res.get_json()['error']
    game = client.get(f'/api/games/{gid}').get_json()
    assert game['rounds_remaining'] == 2
    assert game['seconds_per_question'] == 7


def test_start_errors(client, player_ids):
    assert client.post('/api/games/999/start').status_code == 404
    gid = _create(client, player_ids[0])['game_id']
    assert client.post(f'/api/games/{gid}/start').status_code == 200
    res = client.post(f'/api/games/{gid}/start')
    assert res.status_code == 409
    assert res.get_json()['kind'] == 'precondition'


def test_full_game_flow(client, player_ids):
    host, guest = player_ids[0], player_ids[1]
    data = _create(client, host)
    gid = data['game_id']
    client.post('/api/games/join', json={'join_code': data['join_code'], 'player_id': guest})
    client.patch(f'/api/games/{gid}/settings', json={'rounds_remaining': 2, 'seconds_per_question': 5})
    client.post(f'/api/games/{gid}/start')

    texts = []
    for guess in (0.9, 0.2):
        fire_next_tick(gid)
        game = client.get(f'/api/games/{gid}').get_json()
        assert game['phase'] == 'round_open'
        current = client.get(f'/api/games/{gid}/round').get_json()
        assert 'answer' not in current['question']
        assert current['guesses'] == {host: 0.5, guest: 0.5}
        texts.append(current['question']['text'])
        res = client.post(f'/api/games/{gid}/guess', json={
            'player_id': host, 'question_text': current['question']['text'], 'guess': guess,
        })
        assert res.status_code == 200
        fire_next_tick(gid)
        assert client.get(f'/api/games/{gid}/round').get_json() is None

    # Final tick finds nothing to do and does not re-arm
    fire_next_tick(gid)
    game = client.get(f'/api/games/{gid}').get_json()
    assert game['phase'] == 'game_over'
    assert game['rounds_remaining'] == 0
    assert [r['question']['text'] for r in game['finished_rounds']] == texts
    assert len(set(texts)) == 2
    assert [r['guesses'][host] for r in game['finished_rounds']] == [0.9, 0.2]

    scores = client.get(f'/api/games/{gid}/scores').get_json()
    assert scores['phase'] == 'game_over'
    assert scores['totals'][guest] == 0
    assert set(scores['calibration']) == {host, guest}


def test_reset_returns_to_lobby(client, player_ids):
    gid = _create(client, player_ids[0])['game_id']
    client.patch(f'/api/games/{gid}/settings', json={'rounds_remaining': 1})
    client.post(f'/api/games/{gid}/start')
    fire_next_tick(gid)
    fire_next_tick(gid)
    fire_next_tick(gid)
    assert client.get(f'/api/games/{gid}').get_json()['phase'] == 'game_over'

    assert client.post(f'/api/games/{gid}/reset').get_json() == {'ok': True}
    game = client.get(f'/api/games/{gid}').get_json()
    assert game['started'] is False
    assert game['rounds_remaining'] == 4
    assert game['finished_rounds'] == []
    # Settings are editable again
    assert client.patch(f'/api/games/{gid}/settings', json={'rounds_remaining': 3}).status_code == 200


def test_scores_for_missing_game(client):
    assert client.get('/api/games/999/scores').status_code == 404
