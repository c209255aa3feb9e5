"""
CONFIDENTIAL ROCK-PAPER-SCISSORS: TWO PLAYERS

Moves arrive encrypted, are sanitized on arrival and never leave ciphertext.
Only the outcome is decrypted, asynchronously, through the reveal gate:

  start_game -> submit_move x2 -> request_reveal -> reveal_callback -> reset_game

Result encoding: 0 = draw, 1 = player1 wins, 2 = player2 wins.
"""

import con_fhe
import con_rps_engine

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

ENGINE = 'con_rps_engine'
NO_PLAYER = ''
NO_MOVE = ''

def clear_game():
    game['player1'] = NO_PLAYER
    game['player2'] = NO_PLAYER
    game['submitted1'] = False
    game['submitted2'] = False

def gate():
    return con_rps_engine.gate_state(owner=ctx.this)

def slot_of(account: str):
    if account == game['player1']:
        return '1'
    if account == game['player2']:
        return '2'
    return None

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# player1, player2, move1, move2, submitted1, submitted2
game = Hash()

metadata = Hash()

# Events
MatchStartedEvent = LogEvent('MatchStarted', {
    'player1': {'type': str, 'idx': True},
    'player2': {'type': str, 'idx': True}
})

MoveSubmittedEvent = LogEvent('MoveSubmitted', {
    'player': {'type': str, 'idx': True},
    'slot': {'type': int}
})

MatchResolvedEvent = LogEvent('MatchResolved', {
    'player1': {'type': str, 'idx': True},
    'player2': {'type': str, 'idx': True},
    'result': {'type': int}
})

MatchResetEvent = LogEvent('MatchReset', {
    'caller': {'type': str, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    metadata['name'] = "Confidential Rock Paper Scissors"
    metadata['operator'] = ctx.caller

    clear_game()
    game['move1'] = NO_MOVE
    game['move2'] = NO_MOVE

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_match():
    state = gate()
    return {
        'player1': game['player1'],
        'player2': game['player2'],
        'submitted1': game['submitted1'],
        'submitted2': game['submitted2'],
        'pending': state['pending'],
        'revealed': state['revealed'],
        'result': state['result']
    }

@export
def get_winner():
    state = gate()
    assert state['revealed'], 'Current game not revealed yet'
    if state['result'] == 1:
        return game['player1']
    if state['result'] == 2:
        return game['player2']
    return NO_PLAYER

# -----------------------------------------------------------------------------
# Match lifecycle
# -----------------------------------------------------------------------------

@export
def start_game(opponent: str):
    assert game['player1'] == NO_PLAYER, 'Game already in progress'
    assert opponent != NO_PLAYER, 'Invalid opponent'
    assert opponent != ctx.caller, 'Cannot play against yourself'

    game['player1'] = ctx.caller
    game['player2'] = opponent

    MatchStartedEvent({
        'player1': ctx.caller,
        'player2': opponent
    })

@export
def submit_move(ciphertext: str, proof: str):
    player = ctx.caller
    assert game['player1'] != NO_PLAYER, 'No active game'
    slot = slot_of(player)
    assert slot is not None, 'Not a player in this game'
    assert not gate()['revealed'], 'Game already revealed'
    assert not game['submitted' + slot], 'Player' + slot + ' already submitted'

    raw = con_fhe.decode(ciphertext=ciphertext, proof=proof)
    con_fhe.allow(handle=raw, account=ENGINE)
    move = con_rps_engine.sanitize_move(move=raw)

    game['move' + slot] = move
    game['submitted' + slot] = True

    MoveSubmittedEvent({
        'player': player,
        'slot': int(slot)
    })

@export
def request_reveal():
    assert game['submitted1'] and game['submitted2'], 'Both players must submit moves first'
    return con_rps_engine.open_reveal(move1=game['move1'], move2=game['move2'])

@export
def reveal_callback(request_id: int, cleartexts: str, proof: str):
    result = con_rps_engine.complete_reveal(
        request_id=request_id,
        cleartexts=cleartexts,
        proof=proof
    )

    MatchResolvedEvent({
        'player1': game['player1'],
        'player2': game['player2'],
        'result': result
    })
    return result

@export
def reset_game():
    assert gate()['revealed'], 'Current game not revealed yet'
    assert slot_of(ctx.caller) is not None, 'Only players can reset'

    # Move handles stay in storage until the next match overwrites them
    clear_game()
    con_rps_engine.close_reveal()

    MatchResetEvent({
        'caller': ctx.caller
    })
