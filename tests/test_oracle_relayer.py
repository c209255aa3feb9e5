import pytest

from oracle_relayer import DecryptionRelayer


def start_two_party(rps, helper, move1, move2):
    rps.start_game(opponent="bob", signer="alice")
    for player, move in (("alice", move1), ("bob", move2)):
        encrypted = helper.encrypt_move(move, "con_rps_two_party", player)
        rps.submit_move(ciphertext=encrypted["ciphertext"], proof=encrypted["proof"], signer=player)
    return rps.request_reveal(signer="alice")


def start_solo(solo, helper, move):
    encrypted = helper.encrypt_move(move, "con_rps_solo", "carol")
    return solo.play_against_oracle(ciphertext=encrypted["ciphertext"], proof=encrypted["proof"], signer="carol")


def test_nothing_pending_on_fresh_deploy(relayer):
    assert relayer.pending_requests() == []
    assert relayer.drain() == {}


def test_drain_serves_every_match(rps, solo, relayer, helper_module):
    first = start_two_party(rps, helper_module, helper_module.SCISSORS, helper_module.PAPER)
    second = start_solo(solo, helper_module, helper_module.ROCK)

    pending = relayer.pending_requests()
    assert [req["request_id"] for req in pending] == [first, second]
    assert [req["callback"] for req in pending] == ["con_rps_two_party", "con_rps_solo"]

    results = relayer.drain()
    oracle = helper_module.mock_random_byte(1) % 3
    assert results == {
        first: helper_module.FIRST_WINS,
        second: helper_module.expected_result(helper_module.ROCK, oracle),
    }
    assert rps.get_match()["revealed"]
    assert solo.get_match()["revealed"]
    assert relayer.pending_requests() == []


def test_decrypt_builds_verifiable_response(rps, relayer, helper_module):
    request_id = start_two_party(rps, helper_module, helper_module.ROCK, helper_module.PAPER)

    response = relayer.decrypt(request_id)
    assert response["callback"] == "con_rps_two_party"
    assert helper_module.decode_cleartexts(response["cleartexts"]) == [helper_module.SECOND_WINS]
    assert response["proof"] == helper_module.decryption_proof(request_id, response["cleartexts"])


def test_redelivery_is_rejected(rps, relayer, helper_module):
    request_id = start_two_party(rps, helper_module, helper_module.PAPER, helper_module.PAPER)
    response = relayer.decrypt(request_id)

    assert relayer.deliver(response) == helper_module.DRAW
    with pytest.raises(AssertionError):
        relayer.deliver(response)

    assert rps.get_match()["result"] == helper_module.DRAW


def test_relayer_with_wrong_key_cannot_reveal(client, rps, helper_module):
    request_id = start_two_party(rps, helper_module, helper_module.ROCK, helper_module.SCISSORS)
    rogue = DecryptionRelayer(client, kms_key="rogue-key")

    with pytest.raises(AssertionError, match="Invalid decryption proof"):
        rogue.fulfill(request_id)

    match = rps.get_match()
    assert match["pending"]
    assert not match["revealed"]


def test_unknown_request(relayer):
    with pytest.raises(ValueError):
        relayer.decrypt(42)


def queue_own_request(fhe, callback, account="mallory"):
    handle = fhe.as_euint8(value=1, signer=account)
    fhe.allow_for_decryption(handle=handle, signer=account)
    return fhe.request_decryption(handles=[handle], callback=callback, signer=account)


def test_undeliverable_requests_do_not_block_matches(fhe, rps, relayer, helper_module):
    missing = queue_own_request(fhe, "con_nowhere")
    hijack = queue_own_request(fhe, "con_rps_two_party")
    not_a_match = queue_own_request(fhe, "con_fhe")
    request_id = start_two_party(rps, helper_module, helper_module.ROCK, helper_module.SCISSORS)

    assert relayer.drain() == {request_id: helper_module.FIRST_WINS}
    assert rps.get_match()["revealed"]
    assert set(relayer.failures) == {missing, hijack, not_a_match}
    assert "not deployed" in relayer.failures[missing]

    # Failed requests stay pending on chain but are not retried
    assert fhe.get_request(request_id=missing)["status"] == "pending"
    assert relayer.pending_requests() == []
    assert relayer.drain() == {}


def test_cursor_skips_settled_requests(fhe, rps, solo, relayer, helper_module):
    first = start_two_party(rps, helper_module, helper_module.PAPER, helper_module.ROCK)
    relayer.drain()
    assert relayer.pending_requests() == []
    assert relayer.cursor == first + 1

    second = start_solo(solo, helper_module, helper_module.PAPER)
    assert [req["request_id"] for req in relayer.pending_requests()] == [second]
    assert relayer.cursor == second

    relayer.drain()
    assert relayer.pending_requests() == []
    assert relayer.cursor == second + 1


def test_cursor_stops_at_first_open_request(fhe, rps, solo, relayer, helper_module):
    first = start_two_party(rps, helper_module, helper_module.PAPER, helper_module.ROCK)
    second = start_solo(solo, helper_module, helper_module.ROCK)

    relayer.fulfill(second)
    assert [req["request_id"] for req in relayer.pending_requests()] == [first]
    assert relayer.cursor == first
