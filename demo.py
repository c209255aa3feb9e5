"""
Rock Paper Scissors with encrypted moves: local demo and step commands.

`play` deploys the contracts on a fresh in-process ContractingClient, plays one
two-player match (alice vs bob) and one solo match against the oracle, and
lets the decryption relayer deliver both results.

The other commands drive the two-player contract one step at a time against
persistent local state, the relayer standing in for the decryption oracle:

    python demo.py play --move1 0 --move2 2 --solo-move 1
    python demo.py start --player1 alice --player2 bob
    python demo.py submit --player alice --move 0
    python demo.py submit --player bob --move 2
    python demo.py reveal --player alice
    python demo.py result
    python demo.py reset --player alice
"""
import argparse

import client_helper
from deploy import deploy, ensure_deployed, local_client, persistent_client
from oracle_relayer import DecryptionRelayer

TWO_PARTY = "con_rps_two_party"


def play_two_party(client, contracts, move1: int, move2: int, alice: str = "alice", bob: str = "bob") -> int:
    rps = contracts[TWO_PARTY]
    relayer = DecryptionRelayer(client)

    print("Starting a two-player game: %s vs %s" % (alice, bob))
    rps.start_game(opponent=bob, signer=alice)

    for player, move in ((alice, move1), (bob, move2)):
        encrypted = client_helper.encrypt_move(move, TWO_PARTY, player)
        rps.submit_move(ciphertext=encrypted["ciphertext"], proof=encrypted["proof"], signer=player)
        print("  %s submitted an encrypted move" % player)

    rps.request_reveal(signer=alice)
    print("  reveal requested, waiting for the decryption oracle...")
    relayer.drain()

    match = rps.get_match()
    print(client_helper.format_status(match))
    winner = rps.get_winner()
    print("  winner: %s" % (winner or "nobody"))

    rps.reset_game(signer=alice)
    return match["result"]


def play_solo(client, contracts, move: int, player: str = "alice") -> int:
    solo = contracts["con_rps_solo"]
    relayer = DecryptionRelayer(client)

    print("Playing against the oracle as %s" % player)
    encrypted = client_helper.encrypt_move(move, "con_rps_solo", player)
    solo.play_against_oracle(ciphertext=encrypted["ciphertext"], proof=encrypted["proof"], signer=player)
    relayer.drain()

    match = solo.get_match()
    print(client_helper.format_status(match))

    solo.reset_game(signer=player)
    return match["result"]


def run_demo(client=None, move1: int = client_helper.ROCK, move2: int = client_helper.SCISSORS,
             solo_move: int = client_helper.PAPER):
    if client is None:
        client = local_client()
    contracts = deploy(client)

    return {
        "two_party": play_two_party(client, contracts, move1, move2),
        "solo": play_solo(client, contracts, solo_move),
    }


# ---- Step commands ------------------------------------------------------------

def cmd_play(client, args) -> int:
    results = run_demo(client, move1=args.move1, move2=args.move2, solo_move=args.solo_move)
    print("Two-player result: %s" % client_helper.RESULT_NAMES[results["two_party"]])
    print("Solo result: %s" % ("Draw", "Player wins", "Oracle wins")[results["solo"]])
    return 0


def cmd_start(client, args) -> int:
    rps = ensure_deployed(client)[TWO_PARTY]
    rps.start_game(opponent=args.player2, signer=args.player1)
    print("Player 1: %s" % args.player1)
    print("Player 2: %s" % args.player2)
    print("Game started successfully!")
    return 0


def cmd_submit(client, args) -> int:
    rps = ensure_deployed(client)[TWO_PARTY]
    encrypted = client_helper.encrypt_move(args.move, TWO_PARTY, args.player)
    rps.submit_move(ciphertext=encrypted["ciphertext"], proof=encrypted["proof"], signer=args.player)
    print("Player: %s" % args.player)
    if 0 <= args.move < len(client_helper.MOVE_NAMES):
        print("Move: %s" % client_helper.MOVE_NAMES[args.move])
    print("Move submitted successfully!")
    return 0


def cmd_reveal(client, args) -> int:
    rps = ensure_deployed(client)[TWO_PARTY]
    request_id = rps.request_reveal(signer=args.player)
    print("Reveal requested! (request %d)" % request_id)
    print("Running the decryption oracle...")
    DecryptionRelayer(client).drain()
    print("Decryption complete! Use the result command to see the winner.")
    return 0


def cmd_result(client, args) -> int:
    rps = ensure_deployed(client)[TWO_PARTY]
    print(client_helper.format_status(rps.get_match()))
    return 0


def cmd_reset(client, args) -> int:
    rps = ensure_deployed(client)[TWO_PARTY]
    rps.reset_game(signer=args.player)
    print("Game reset successfully! You can start a new game now.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rps-demo")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Fresh end-to-end run of both variants")
    play.add_argument("--move1", type=int, default=client_helper.ROCK, help="0=Rock, 1=Paper, 2=Scissors")
    play.add_argument("--move2", type=int, default=client_helper.SCISSORS)
    play.add_argument("--solo-move", type=int, default=client_helper.PAPER)
    play.set_defaults(func=cmd_play, fresh=True)

    start = sub.add_parser("start", help="Start a new two-player game")
    start.add_argument("--player1", required=True)
    start.add_argument("--player2", required=True)
    start.set_defaults(func=cmd_start)

    submit = sub.add_parser("submit", help="Submit an encrypted move (0=Rock, 1=Paper, 2=Scissors)")
    submit.add_argument("--player", required=True)
    submit.add_argument("--move", type=int, required=True)
    submit.set_defaults(func=cmd_submit)

    reveal = sub.add_parser("reveal", help="Request revelation of the game result")
    reveal.add_argument("--player", required=True)
    reveal.set_defaults(func=cmd_reveal)

    result = sub.add_parser("result", help="Check the game result")
    result.set_defaults(func=cmd_result)

    reset = sub.add_parser("reset", help="Reset the game for a new round")
    reset.add_argument("--player", required=True)
    reset.set_defaults(func=cmd_reset)

    return parser


def main(argv=None, client=None) -> int:
    args = build_parser().parse_args(argv)
    if client is None:
        client = local_client() if getattr(args, "fresh", False) else persistent_client()
    return args.func(client, args)


if __name__ == "__main__":
    raise SystemExit(main())
