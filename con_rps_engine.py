"""
CONFIDENTIAL RPS ENGINE

Shared by every match contract:
  - sanitize_move:    clamp an encrypted byte into {0,1,2}
  - calculate_winner: encrypted outcome of two encrypted moves
  - random_move:      encrypted opponent move drawn by the coprocessor
  - reveal gate:      Idle -> PendingReveal -> Revealed -> Idle

Everything here operates on con_fhe handles only. Gate state is keyed by the
calling match contract, one live gate per contract.
"""

import con_fhe

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

ROCK = 0
PAPER = 1
SCISSORS = 2
MOVE_COUNT = 3

DRAW = 0
FIRST_WINS = 1
SECOND_WINS = 2

def sanitize(move: str):
    # Out-of-range input becomes Rock; no branch on the plaintext
    is_valid = con_fhe.le_scalar(lhs=move, rhs=SCISSORS)
    fallback = con_fhe.as_euint8(value=ROCK)
    return con_fhe.select(condition=is_valid, if_true=move, if_false=fallback)

def beats(first: str, second: str, winning: int, losing: int):
    first_is = con_fhe.eq_scalar(lhs=first, rhs=winning)
    second_is = con_fhe.eq_scalar(lhs=second, rhs=losing)
    return con_fhe.logical_and(lhs=first_is, rhs=second_is)

def winner(move1: str, move2: str):
    is_draw = con_fhe.eq(lhs=move1, rhs=move2)

    rock_wins = beats(move1, move2, ROCK, SCISSORS)
    paper_wins = beats(move1, move2, PAPER, ROCK)
    scissors_wins = beats(move1, move2, SCISSORS, PAPER)
    first_wins = con_fhe.logical_or(
        lhs=con_fhe.logical_or(lhs=rock_wins, rhs=paper_wins),
        rhs=scissors_wins
    )

    # Exactly one of draw / first wins / second wins holds on {0,1,2}^2
    decided = con_fhe.select(
        condition=first_wins,
        if_true=con_fhe.as_euint8(value=FIRST_WINS),
        if_false=con_fhe.as_euint8(value=SECOND_WINS)
    )
    return con_fhe.select(
        condition=is_draw,
        if_true=con_fhe.as_euint8(value=DRAW),
        if_false=decided
    )

def gate(owner: str):
    return {
        'pending': gates[owner, 'pending'] or False,
        'request_id': gates[owner, 'request_id'] or 0,
        'revealed': gates[owner, 'revealed'] or False,
        'result': gates[owner, 'result'] or DRAW
    }

def grant(handle: str):
    con_fhe.allow(handle=handle, account=ctx.caller)
    return handle

def require_caller_access(handle: str):
    # Caller must hold the handle itself, not only the engine
    assert con_fhe.is_allowed(handle=handle, account=ctx.caller), 'Handle not allowed for caller'

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# (match contract, field) -> value; fields: pending, request_id, revealed, result
gates = Hash()

# Events
RevealRequestedEvent = LogEvent('RevealRequested', {
    'owner': {'type': str, 'idx': True},
    'request_id': {'type': int, 'idx': True}
})

ResultRevealedEvent = LogEvent('ResultRevealed', {
    'owner': {'type': str, 'idx': True},
    'request_id': {'type': int, 'idx': True},
    'result': {'type': int}
})

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def gate_state(owner: str):
    return gate(owner)

# -----------------------------------------------------------------------------
# Confidential computation
# -----------------------------------------------------------------------------

@export
def sanitize_move(move: str):
    require_caller_access(move)
    return grant(sanitize(move))

@export
def calculate_winner(move1: str, move2: str):
    require_caller_access(move1)
    require_caller_access(move2)
    return grant(winner(move1, move2))

@export
def random_move():
    # 256 % 3 == 1, so Rock is drawn with 86/256 and Paper, Scissors with 85/256
    draw = con_fhe.rand_euint8()
    return grant(con_fhe.rem_scalar(lhs=draw, rhs=MOVE_COUNT))

# -----------------------------------------------------------------------------
# Reveal gate
# -----------------------------------------------------------------------------

@export
def open_reveal(move1: str, move2: str):
    owner = ctx.caller
    state = gate(owner)

    assert move1 and move2, 'Both moves must be set'
    assert not state['pending'], 'Decryption already pending'
    assert not state['revealed'], 'Game already revealed'
    require_caller_access(move1)
    require_caller_access(move2)

    result = winner(move1, move2)
    con_fhe.allow_for_decryption(handle=result)
    request_id = con_fhe.request_decryption(handles=[result], callback=owner)

    gates[owner, 'request_id'] = request_id
    gates[owner, 'pending'] = True

    RevealRequestedEvent({
        'owner': owner,
        'request_id': request_id
    })
    return request_id

@export
def complete_reveal(request_id: int, cleartexts: str, proof: str):
    owner = ctx.caller
    state = gate(owner)

    assert state['pending'], 'No decryption pending'
    assert request_id == state['request_id'], 'Unknown or stale request id'
    con_fhe.verify_decryption(request_id=request_id, cleartexts=cleartexts, proof=proof)

    result = int(cleartexts[2:66], 16)

    gates[owner, 'result'] = result
    gates[owner, 'revealed'] = True
    gates[owner, 'pending'] = False

    ResultRevealedEvent({
        'owner': owner,
        'request_id': request_id,
        'result': result
    })
    return result

@export
def close_reveal():
    owner = ctx.caller
    assert gate(owner)['revealed'], 'Current game not revealed yet'

    gates[owner, 'pending'] = False
    gates[owner, 'request_id'] = 0
    gates[owner, 'revealed'] = False
    gates[owner, 'result'] = DRAW
