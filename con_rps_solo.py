"""
CONFIDENTIAL ROCK-PAPER-SCISSORS: PLAYER VS ORACLE

One call binds the player, stores the sanitized encrypted move, draws the
oracle's encrypted move and requests decryption of the outcome. The oracle's
move is never decrypted and never exposed.

Result encoding: 0 = draw, 1 = player wins, 2 = oracle wins.
"""

import con_fhe
import con_rps_engine

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

ENGINE = 'con_rps_engine'
NO_PLAYER = ''
NO_MOVE = ''

def gate():
    return con_rps_engine.gate_state(owner=ctx.this)

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# player, move1 (player), move2 (oracle)
game = Hash()

metadata = Hash()

# Events
MatchStartedEvent = LogEvent('MatchStarted', {
    'player': {'type': str, 'idx': True},
    'request_id': {'type': int, 'idx': True}
})

MatchResolvedEvent = LogEvent('MatchResolved', {
    'player': {'type': str, 'idx': True},
    'result': {'type': int}
})

MatchResetEvent = LogEvent('MatchReset', {
    'player': {'type': str, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    metadata['name'] = "Confidential Rock Paper Scissors (solo)"
    metadata['operator'] = ctx.caller

    game['player'] = NO_PLAYER
    game['move1'] = NO_MOVE
    game['move2'] = NO_MOVE

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_match():
    state = gate()
    return {
        'player': game['player'],
        'pending': state['pending'],
        'revealed': state['revealed'],
        'result': state['result']
    }

@export
def get_winner():
    state = gate()
    assert state['revealed'], 'Current game not revealed yet'
    if state['result'] == 1:
        return game['player']
    return NO_PLAYER

# -----------------------------------------------------------------------------
# Match lifecycle
# -----------------------------------------------------------------------------

@export
def play_against_oracle(ciphertext: str, proof: str):
    player = ctx.caller
    assert game['player'] == NO_PLAYER, 'Game already in progress'
    assert not gate()['pending'], 'Decryption already pending'

    raw = con_fhe.decode(ciphertext=ciphertext, proof=proof)
    con_fhe.allow(handle=raw, account=ENGINE)
    move1 = con_rps_engine.sanitize_move(move=raw)
    # Drawn only after the player's move is fixed
    move2 = con_rps_engine.random_move()
    request_id = con_rps_engine.open_reveal(move1=move1, move2=move2)

    game['player'] = player
    game['move1'] = move1
    game['move2'] = move2

    MatchStartedEvent({
        'player': player,
        'request_id': request_id
    })
    return request_id

@export
def reveal_callback(request_id: int, cleartexts: str, proof: str):
    result = con_rps_engine.complete_reveal(
        request_id=request_id,
        cleartexts=cleartexts,
        proof=proof
    )

    MatchResolvedEvent({
        'player': game['player'],
        'result': result
    })
    return result

@export
def reset_game():
    assert gate()['revealed'], 'Current game not revealed yet'
    assert ctx.caller == game['player'], 'Only the player can reset'

    game['player'] = NO_PLAYER
    con_rps_engine.close_reveal()

    MatchResetEvent({
        'player': ctx.caller
    })
