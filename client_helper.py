import hashlib
import secrets
from fractions import Fraction

# ---- Chain-constant parameters & helpers (mirror contracts) ----

ROCK, PAPER, SCISSORS = 0, 1, 2
MOVE_NAMES = ("Rock", "Paper", "Scissors")

DRAW, FIRST_WINS, SECOND_WINS = 0, 1, 2
RESULT_NAMES = ("Draw", "Player 1 wins", "Player 2 wins")

NO_PLAYER = ''

UINT8_MODULUS = 256
WORD_HEX_DIGITS = 64
NONCE_HEX_DIGITS = 16

# Seeded by con_fhe at construction
DEFAULT_NETWORK_KEY = 'xrps-network-key'
DEFAULT_KMS_KEY = 'xrps-kms-key'
DEFAULT_ENTROPY = 'xrps-entropy'

def sha3_hex(s: str) -> str:
    return hashlib.sha3_256(s.encode("utf-8")).hexdigest()

def domain_hash(*parts) -> str:
    return sha3_hex("XRPS:v1|" + "|".join(str(x) for x in parts))

def input_mask(nonce: str, network_key: str = DEFAULT_NETWORK_KEY) -> int:
    return int(domain_hash("mask", network_key, nonce)[:2], 16)

def input_digest(ciphertext: str, contract: str, user: str,
                 network_key: str = DEFAULT_NETWORK_KEY) -> str:
    return domain_hash("input", network_key, ciphertext, contract, user)

def random_nonce() -> str:
    return secrets.token_hex(NONCE_HEX_DIGITS // 2)

# ---- Encrypted inputs ------------------------------------------------------

def encrypt_move(value: int,
                 contract: str,
                 user: str,
                 network_key: str = DEFAULT_NETWORK_KEY,
                 nonce: str = None):
    """
    Returns args for <contract>.submit_move() / play_against_oracle():
        (ciphertext, proof)
    The proof is only valid when `user` signs the call and `contract` is the
    contract that forwards the ciphertext to con_fhe.decode().
    Any byte is accepted; out-of-range moves are clamped to Rock on-chain.
    """
    if not 0 <= value < UINT8_MODULUS:
        raise ValueError("Move must fit in one byte")
    if nonce is None:
        nonce = random_nonce()
    if len(nonce) != NONCE_HEX_DIGITS:
        raise ValueError("Nonce must be %d hex digits" % NONCE_HEX_DIGITS)

    masked = (value + input_mask(nonce, network_key)) % UINT8_MODULUS
    ciphertext = "0x" + nonce + format(masked, "02x")

    return {
        'ciphertext': ciphertext,
        'proof': input_digest(ciphertext, contract, user, network_key)
    }

def decrypt_input(ciphertext: str, network_key: str = DEFAULT_NETWORK_KEY) -> int:
    body = ciphertext[2:]
    if not ciphertext.startswith("0x") or len(body) != NONCE_HEX_DIGITS + 2:
        raise ValueError("Malformed ciphertext")
    nonce, masked = body[:NONCE_HEX_DIGITS], int(body[NONCE_HEX_DIGITS:], 16)
    return (masked - input_mask(nonce, network_key)) % UINT8_MODULUS

# ---- Decryption oracle wire format ------------------------------------------

def encode_cleartexts(values) -> str:
    # One 32-byte big-endian word per decrypted handle
    return "0x" + "".join(format(int(v), "0%dx" % WORD_HEX_DIGITS) for v in values)

def decode_cleartexts(cleartexts: str):
    body = cleartexts[2:]
    if not cleartexts.startswith("0x") or len(body) % WORD_HEX_DIGITS != 0:
        raise ValueError("Malformed cleartexts")
    return [
        int(body[i:i + WORD_HEX_DIGITS], 16)
        for i in range(0, len(body), WORD_HEX_DIGITS)
    ]

def decryption_proof(request_id: int, cleartexts: str, kms_key: str = DEFAULT_KMS_KEY) -> str:
    return domain_hash("kms", kms_key, request_id, cleartexts)

# ---- Coprocessor randomness mirror -------------------------------------------

def mock_random_byte(counter: int, entropy: str = DEFAULT_ENTROPY) -> int:
    """Byte produced by the `counter`-th con_fhe.rand_euint8() draw."""
    return int(domain_hash("rand", entropy, counter)[:2], 16)

def entropy_for_move(move: int, counter: int = 1, attempts: int = 1000) -> str:
    """
    Finds an entropy string for which the `counter`-th draw reduces to `move`.
    Mock-only: lets a test or demo pin the oracle's move.
    """
    for i in range(attempts):
        candidate = "xrps-entropy-%d" % i
        if mock_random_byte(counter, candidate) % 3 == move:
            return candidate
    raise ValueError("No entropy found for move %d" % move)

def opponent_move_distribution():
    """
    Exact distribution of byte % 3 over a uniform byte:
    Rock 86/256, Paper 85/256, Scissors 85/256.
    """
    counts = {ROCK: 0, PAPER: 0, SCISSORS: 0}
    for b in range(UINT8_MODULUS):
        counts[b % 3] += 1
    return {move: Fraction(n, UINT8_MODULUS) for move, n in counts.items()}

# ---- Plaintext reference ----------------------------------------------------

def sanitized(value: int) -> int:
    return value if value <= SCISSORS else ROCK

def expected_result(move1: int, move2: int) -> int:
    if move1 == move2:
        return DRAW
    wins = {(ROCK, SCISSORS), (PAPER, ROCK), (SCISSORS, PAPER)}
    return FIRST_WINS if (move1, move2) in wins else SECOND_WINS

# ---- Status report ----------------------------------------------------------

def format_status(match: dict) -> str:
    """Human-readable report of a get_match() view, either variant."""
    solo = 'player' in match
    lines = ["=== Game Status ==="]
    if solo:
        lines.append("Player: %s" % (match['player'] or "(none)"))
    else:
        lines.append("Player 1: %s" % (match['player1'] or "(none)"))
        lines.append("Player 2: %s" % (match['player2'] or "(none)"))
        lines.append("Player 1 submitted: %s" % bool(match['submitted1']))
        lines.append("Player 2 submitted: %s" % bool(match['submitted2']))
    lines.append("Decryption pending: %s" % bool(match['pending']))
    lines.append("Game revealed: %s" % bool(match['revealed']))

    if match['revealed']:
        result = match['result']
        if result == DRAW:
            lines.append("Result: Draw!")
        elif solo:
            lines.append("Result: " + ("Player wins!" if result == FIRST_WINS else "Oracle wins!"))
        elif result == FIRST_WINS:
            lines.append("Result: Player 1 wins! (%s)" % match['player1'])
        else:
            lines.append("Result: Player 2 wins! (%s)" % match['player2'])
    elif match['pending']:
        lines.append("Waiting for the decryption oracle to deliver the result.")
    elif not solo and match['submitted1'] and match['submitted2']:
        lines.append("Both players have submitted. Request the reveal to compute the result.")
    else:
        lines.append("Waiting for moves.")
    return "\n".join(lines)
