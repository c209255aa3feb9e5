import pytest
from contracting.client import ContractingClient

import client_helper
import deploy as deployment
from oracle_relayer import DecryptionRelayer


@pytest.fixture(scope="session", autouse=True)
def enable_sha3_and_whitelist():
    deployment.enable_sha3_and_whitelist()


@pytest.fixture(scope="session")
def helper_module():
    return client_helper


@pytest.fixture
def client():
    client = ContractingClient(signer="operator", metering=False)
    client.flush()
    client.set_submission_contract(str(deployment.SUBMISSION_PATH))
    return client


@pytest.fixture
def contracts(client):
    return deployment.deploy(client)


@pytest.fixture
def fhe(contracts):
    return contracts["con_fhe"]


@pytest.fixture
def engine(contracts):
    return contracts["con_rps_engine"]


@pytest.fixture
def rps(contracts):
    return contracts["con_rps_two_party"]


@pytest.fixture
def solo(contracts):
    return contracts["con_rps_solo"]


@pytest.fixture
def relayer(client, contracts):
    return DecryptionRelayer(client)
