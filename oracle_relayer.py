from client_helper import DEFAULT_KMS_KEY, decryption_proof, encode_cleartexts

FHE_CONTRACT = 'con_fhe'


class DecryptionRelayer:
    """
    Off-chain side of the decryption oracle for a local ContractingClient.

    Requests are recorded on-chain by con_fhe.request_decryption(); nothing
    waits on them. The relayer picks them up later, decrypts, signs the
    cleartexts with the KMS key and calls <callback>.reveal_callback() as an
    independent transaction.

    A request whose callback is missing or rejects the response is recorded in
    `failures` and not retried, so it never holds back the requests behind it.
    """
    def __init__(self, client, kms_key: str = DEFAULT_KMS_KEY, signer: str = 'relayer',
                 fhe_contract: str = FHE_CONTRACT):
        self.client = client
        self.kms_key = kms_key
        self.signer = signer
        self.fhe = client.get_contract(fhe_contract)
        self.failures = {}
        # Every request below this id is fulfilled or failed
        self.cursor = 1

    def pending_requests(self):
        pending = []
        advancing = True
        for request_id in range(self.cursor, self.fhe.request_count() + 1):
            req = self.fhe.get_request(request_id=request_id)
            done = req['status'] != 'pending' or request_id in self.failures
            if advancing and done:
                self.cursor = request_id + 1
                continue
            advancing = False
            if not done:
                pending.append(req)
        return pending

    def decrypt(self, request_id: int):
        """
        Returns the callback payload for one request:
            {request_id, callback, cleartexts, proof}
        """
        req = self.fhe.get_request(request_id=request_id)
        if not req['exists']:
            raise ValueError("Unknown decryption request %d" % request_id)

        values = [self.fhe.handle_values[handle] for handle in req['handles']]
        cleartexts = encode_cleartexts(values)
        return {
            'request_id': request_id,
            'callback': req['callback'],
            'cleartexts': cleartexts,
            'proof': decryption_proof(request_id, cleartexts, self.kms_key)
        }

    def deliver(self, response: dict):
        target = self.client.get_contract(response['callback'])
        if target is None:
            raise ValueError("Callback contract %s is not deployed" % response['callback'])
        return target.reveal_callback(
            request_id=response['request_id'],
            cleartexts=response['cleartexts'],
            proof=response['proof'],
            signer=self.signer,
        )

    def fulfill(self, request_id: int):
        return self.deliver(self.decrypt(request_id))

    def drain(self):
        """
        Fulfils every pending request in order; returns {request_id: result}.
        Undeliverable requests end up in `failures` as {request_id: reason}.
        """
        results = {}
        for req in self.pending_requests():
            request_id = req['request_id']
            try:
                results[request_id] = self.fulfill(request_id)
            except (AssertionError, ValueError, AttributeError) as e:
                self.failures[request_id] = str(e) or e.__class__.__name__
        return results
