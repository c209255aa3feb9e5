"""
CONFIDENTIAL VALUE COPROCESSOR (MOCK)

Opaque handles stand for encrypted integers (euint8) and booleans (ebool).
Callers only ever see handles; plaintexts are reachable through the
decryption oracle, and only for handles explicitly marked decryptable.

Mock mode: plaintexts are kept in this contract's storage, the same way the
fhEVM hardhat mock keeps them. Keys are operator-configured strings.
"""

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

EUINT8 = 'euint8'
EBOOL = 'ebool'
UINT8_MODULUS = 256
WORD_HEX_DIGITS = 64
NONCE_HEX_DIGITS = 16

def domain_hash(*parts):
    s = "|".join(str(x) for x in parts)
    return hashlib.sha3("XRPS:v1|" + s)

def input_mask(nonce: str):
    return int(domain_hash("mask", metadata['network_key'], nonce)[:2], 16)

def input_digest(ciphertext: str, contract: str, user: str):
    return domain_hash("input", metadata['network_key'], ciphertext, contract, user)

def decryption_digest(request_id: int, cleartexts: str):
    return domain_hash("kms", metadata['kms_key'], request_id, cleartexts)

def encode_words(values: list):
    out = "0x"
    for v in values:
        word = hex(v)[2:]
        out += "0" * (WORD_HEX_DIGITS - len(word)) + word
    return out

def new_handle(kind: str, value: int):
    n = next_handle.get()
    next_handle.set(n + 1)
    handle = "0x" + domain_hash("handle", n)
    handle_values[handle] = value
    handle_types[handle] = kind
    acl[handle, ctx.caller] = True
    return handle

def require_access(handle: str, kind: str):
    assert acl[handle, ctx.caller], 'Handle not allowed for caller'
    assert handle_types[handle] == kind, 'Expected ' + kind + ' handle'
    return handle_values[handle]

def as_bool(value):
    return 1 if value else 0

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# handle -> int (plaintext, mock only)
handle_values = Hash()
# handle -> 'euint8' | 'ebool'
handle_types = Hash()
# (handle, account) -> bool
acl = Hash()
# handle -> bool
decryptable = Hash()
# str(request_id) -> {'handles': list, 'requester': str, 'callback': str, 'status': str}
decryption_requests = Hash()

# operator, network_key, kms_key, entropy
metadata = Hash()

next_handle = Variable()
next_request_id = Variable()
next_draw = Variable()

# Events
DecryptionRequestedEvent = LogEvent('DecryptionRequested', {
    'requester': {'type': str, 'idx': True},
    'callback': {'type': str, 'idx': True},
    'request_id': {'type': int, 'idx': True}
})

DecryptionFulfilledEvent = LogEvent('DecryptionFulfilled', {
    'requester': {'type': str, 'idx': True},
    'request_id': {'type': int, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    metadata['operator'] = ctx.caller
    metadata['network_key'] = 'xrps-network-key'
    metadata['kms_key'] = 'xrps-kms-key'
    metadata['entropy'] = 'xrps-entropy'

    next_handle.set(1)
    next_request_id.set(1)
    next_draw.set(1)

# -----------------------------------------------------------------------------
# Views / Config
# -----------------------------------------------------------------------------

@export
def configure(key: str, value: str):
    assert ctx.caller == metadata['operator'], 'Only operator can configure'
    assert key in ('network_key', 'kms_key', 'entropy'), 'Unknown setting'
    metadata[key] = value

@export
def get_request(request_id: int):
    req = decryption_requests[str(request_id)]
    if req is None:
        return {'exists': False, 'request_id': request_id}
    return {
        'exists': True,
        'request_id': request_id,
        'handles': req['handles'],
        'requester': req['requester'],
        'callback': req['callback'],
        'status': req['status']
    }

@export
def request_count():
    return next_request_id.get() - 1

@export
def is_allowed(handle: str, account: str):
    if acl[handle, account]:
        return True
    return False

# -----------------------------------------------------------------------------
# Inputs
# -----------------------------------------------------------------------------

@export
def decode(ciphertext: str, proof: str):
    # Input proofs bind the ciphertext to (calling contract, transaction signer)
    assert ciphertext.startswith("0x"), 'Malformed ciphertext'
    body = ciphertext[2:]
    assert len(body) == NONCE_HEX_DIGITS + 2, 'Malformed ciphertext'
    assert proof == input_digest(ciphertext, ctx.caller, ctx.signer), 'Invalid input proof'

    nonce = body[:NONCE_HEX_DIGITS]
    masked = int(body[NONCE_HEX_DIGITS:], 16)
    value = (masked - input_mask(nonce)) % UINT8_MODULUS
    return new_handle(EUINT8, value)

@export
def as_euint8(value: int):
    assert 0 <= value < UINT8_MODULUS, 'Value out of euint8 range'
    return new_handle(EUINT8, value)

@export
def rand_euint8():
    n = next_draw.get()
    next_draw.set(n + 1)
    value = int(domain_hash("rand", metadata['entropy'], n)[:2], 16)
    return new_handle(EUINT8, value)

# -----------------------------------------------------------------------------
# Homomorphic operations
# -----------------------------------------------------------------------------

@export
def eq(lhs: str, rhs: str):
    a = require_access(lhs, EUINT8)
    b = require_access(rhs, EUINT8)
    return new_handle(EBOOL, as_bool(a == b))

@export
def eq_scalar(lhs: str, rhs: int):
    a = require_access(lhs, EUINT8)
    return new_handle(EBOOL, as_bool(a == rhs))

@export
def le_scalar(lhs: str, rhs: int):
    a = require_access(lhs, EUINT8)
    return new_handle(EBOOL, as_bool(a <= rhs))

@export
def logical_and(lhs: str, rhs: str):
    a = require_access(lhs, EBOOL)
    b = require_access(rhs, EBOOL)
    return new_handle(EBOOL, as_bool(a == 1 and b == 1))

@export
def logical_or(lhs: str, rhs: str):
    a = require_access(lhs, EBOOL)
    b = require_access(rhs, EBOOL)
    return new_handle(EBOOL, as_bool(a == 1 or b == 1))

@export
def select(condition: str, if_true: str, if_false: str):
    c = require_access(condition, EBOOL)
    kind = handle_types[if_true]
    assert kind == handle_types[if_false], 'Select branches must share a type'
    t = require_access(if_true, kind)
    f = require_access(if_false, kind)
    return new_handle(kind, t if c == 1 else f)

@export
def rem_scalar(lhs: str, rhs: int):
    assert rhs > 0, 'Modulus must be positive'
    a = require_access(lhs, EUINT8)
    return new_handle(EUINT8, a % rhs)

# -----------------------------------------------------------------------------
# Access control
# -----------------------------------------------------------------------------

@export
def allow(handle: str, account: str):
    assert acl[handle, ctx.caller], 'Handle not allowed for caller'
    acl[handle, account] = True

@export
def allow_for_decryption(handle: str):
    assert acl[handle, ctx.caller], 'Handle not allowed for caller'
    decryptable[handle] = True

# -----------------------------------------------------------------------------
# Decryption oracle
# -----------------------------------------------------------------------------

@export
def request_decryption(handles: list, callback: str):
    assert len(handles) > 0, 'Nothing to decrypt'
    for handle in handles:
        assert acl[handle, ctx.caller], 'Handle not allowed for caller'
        assert decryptable[handle], 'Handle not marked decryptable'

    request_id = next_request_id.get()
    next_request_id.set(request_id + 1)

    decryption_requests[str(request_id)] = {
        'handles': handles,
        'requester': ctx.caller,
        'callback': callback,
        'status': 'pending'
    }

    DecryptionRequestedEvent({
        'requester': ctx.caller,
        'callback': callback,
        'request_id': request_id
    })
    return request_id

@export
def verify_decryption(request_id: int, cleartexts: str, proof: str):
    req = decryption_requests[str(request_id)]
    assert req is not None, 'Unknown decryption request'
    assert req['requester'] == ctx.caller, 'Request not owned by caller'
    assert req['status'] == 'pending', 'Decryption already fulfilled'
    assert proof == decryption_digest(request_id, cleartexts), 'Invalid decryption proof'

    values = []
    for handle in req['handles']:
        values.append(handle_values[handle])
    assert cleartexts == encode_words(values), 'Cleartexts do not match request'

    req['status'] = 'fulfilled'
    decryption_requests[str(request_id)] = req

    DecryptionFulfilledEvent({
        'requester': ctx.caller,
        'request_id': request_id
    })
    return True
