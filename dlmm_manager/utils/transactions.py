"""Transaction signing, submission and confirmation"""

import logging

from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

logger = logging.getLogger(__name__)


def normalize_transactions(result):
    """
    Normalize an SDK transaction-builder result into a list.

    SDK builders return either a single transaction or a list of them
    (e.g. one per bin-array chunk). None yields an empty list.
    """
    if result is None:
        return []
    if isinstance(result, (list, tuple)):
        return list(result)
    return [result]


def sign_versioned(tx, signers):
    """
    Add signatures to a versioned transaction without discarding the ones
    already present.

    Each required signer slot is filled from signers when one matches its
    account key, otherwise the existing signature is kept.

    Raises:
        ValueError: If a required signer slot is left unsigned
    """
    message = tx.message
    message_bytes = to_bytes_versioned(message)
    by_pubkey = {signer.pubkey(): signer for signer in signers}
    required = message.account_keys[:message.header.num_required_signatures]
    existing = list(tx.signatures)

    signatures = []
    for index, pubkey in enumerate(required):
        signer = by_pubkey.get(pubkey)
        if signer is not None:
            signatures.append(signer.sign_message(message_bytes))
        elif index < len(existing) and existing[index] != Signature.default():
            signatures.append(existing[index])
        else:
            raise ValueError(f"Missing signature for required signer {pubkey}")

    return VersionedTransaction.populate(message, signatures)


class TransactionSender:
    """Sign SDK-built transactions and submit them with blocking confirmation"""

    def __init__(self, manager, commitment=Confirmed, skip_preflight=False):
        """
        Args:
            manager: SolanaManager instance
            commitment: Commitment level awaited after each submission
            skip_preflight: Skip RPC simulation before submitting
        """
        self.manager = manager
        self.commitment = commitment
        self.opts = TxOpts(skip_preflight=skip_preflight, preflight_commitment=commitment)

    def sign(self, tx, signers):
        """
        Sign a transaction with the given keypairs.

        Signatures the SDK already added (e.g. a freshly generated
        position keypair) are kept.
        """
        if isinstance(tx, VersionedTransaction):
            return sign_versioned(tx, signers)

        blockhash = tx.message.recent_blockhash
        if blockhash == Hash.default():
            blockhash = self.manager.get_latest_blockhash()
        tx.partial_sign(signers, blockhash)
        return tx

    def send_and_confirm(self, tx, signers):
        """
        Sign, send and wait for confirmation.

        Returns:
            Transaction signature
        """
        signed = self.sign(tx, signers)
        signature = self.manager.client.send_transaction(signed, opts=self.opts).value
        logger.debug("Sent transaction %s, awaiting confirmation", signature)

        self.manager.client.confirm_transaction(signature, commitment=self.commitment)
        logger.info("Confirmed transaction %s", signature)
        return signature

    def send_all(self, result, signers):
        """
        Submit every transaction of an SDK result, strictly in order.

        Each one is confirmed before the next is sent.

        Returns:
            List of signatures
        """
        return [self.send_and_confirm(tx, signers) for tx in normalize_transactions(result)]
