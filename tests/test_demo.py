import pytest

import demo


def test_run_demo(client, helper_module):
    results = demo.run_demo(client)

    oracle = helper_module.mock_random_byte(1) % 3
    assert results == {
        "two_party": helper_module.FIRST_WINS,
        "solo": helper_module.expected_result(helper_module.PAPER, oracle),
    }


def test_run_demo_with_chosen_moves(client, helper_module):
    results = demo.run_demo(client, move1=helper_module.ROCK, move2=helper_module.PAPER)
    assert results["two_party"] == helper_module.SECOND_WINS


def test_play_command_prints_results(capsys):
    assert demo.main(["play", "--move1", "1", "--move2", "1"]) == 0

    out = capsys.readouterr().out
    assert "Two-player result: Draw" in out
    assert "Solo result:" in out


def test_step_commands_play_a_match(client, capsys):
    assert demo.main(["start", "--player1", "alice", "--player2", "bob"], client=client) == 0
    assert demo.main(["submit", "--player", "alice", "--move", "2"], client=client) == 0
    assert demo.main(["submit", "--player", "bob", "--move", "1"], client=client) == 0

    demo.main(["result"], client=client)
    assert "Request the reveal" in capsys.readouterr().out

    assert demo.main(["reveal", "--player", "bob"], client=client) == 0
    demo.main(["result"], client=client)
    assert "Player 1 wins! (alice)" in capsys.readouterr().out

    assert demo.main(["reset", "--player", "alice"], client=client) == 0
    assert client.get_contract("con_rps_two_party").get_match()["player1"] == ""


def test_step_commands_surface_contract_errors(client):
    demo.main(["start", "--player1", "alice", "--player2", "bob"], client=client)

    with pytest.raises(AssertionError, match="Both players must submit moves first"):
        demo.main(["reveal", "--player", "alice"], client=client)


def test_a_command_is_required():
    with pytest.raises(SystemExit):
        demo.main([])
