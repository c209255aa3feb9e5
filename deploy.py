import hashlib
from pathlib import Path

import contracting
from contracting.client import ContractingClient
from contracting.compilation import whitelists

PROJECT_ROOT = Path(__file__).resolve().parent
SUBMISSION_PATH = (
    Path(contracting.__file__).resolve().parent / "contracts" / "submission.s.py"
)

# Dependency order: each contract imports only the ones before it
CONTRACTS = ("con_fhe", "con_rps_engine", "con_rps_two_party", "con_rps_solo")


def enable_sha3_and_whitelist():
    whitelists.ALLOWED_BUILTINS.update({"hashlib", "decimal"})

    if not hasattr(hashlib, "sha3"):
        def _sha3(data):
            if isinstance(data, str):
                data = data.encode("utf-8")
            return hashlib.sha3_256(data).hexdigest()

        setattr(hashlib, "sha3", _sha3)


def local_client(signer: str = "operator") -> ContractingClient:
    enable_sha3_and_whitelist()
    client = ContractingClient(signer=signer, metering=False)
    client.flush()
    client.set_submission_contract(str(SUBMISSION_PATH))
    return client


def contract_source(name: str) -> str:
    return (PROJECT_ROOT / (name + ".py")).read_text()


def deploy(client: ContractingClient, names=CONTRACTS):
    for name in names:
        client.submit(contract_source(name), name=name, owner=None)
    return {name: client.get_contract(name) for name in names}


def ensure_deployed(client: ContractingClient, names=CONTRACTS):
    """Submits only the contracts missing from the client's state; returns all of them."""
    missing = [name for name in names if client.get_contract(name) is None]
    deploy(client, missing)
    return {name: client.get_contract(name) for name in names}


def persistent_client(signer: str = "operator") -> ContractingClient:
    # No flush: state survives between separate command invocations
    enable_sha3_and_whitelist()
    client = ContractingClient(signer=signer, metering=False)
    client.set_submission_contract(str(SUBMISSION_PATH))
    return client
