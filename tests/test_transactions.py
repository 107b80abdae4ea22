"""Transaction submission ordering"""

from unittest.mock import MagicMock

import pytest
from solana.rpc.commitment import Confirmed
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.signature import Signature
from solders.system_program import CreateAccountParams, create_account
from solders.transaction import VersionedTransaction

from dlmm_manager.utils.transactions import TransactionSender, normalize_transactions


@pytest.mark.parametrize("result, expected", [
    (None, []),
    ("tx", ["tx"]),
    (["a", "b"], ["a", "b"]),
    (("a",), ["a"]),
])
def test_normalize_transactions(result, expected):
    assert normalize_transactions(result) == expected


@pytest.fixture
def tx_sender(manager):
    sender = TransactionSender(manager)
    sender.sign = MagicMock(side_effect=lambda tx, signers: f"signed-{tx}")
    return sender


def test_send_and_confirm(tx_sender, manager):
    manager.client.send_transaction.return_value.value = "sig-1"

    assert tx_sender.send_and_confirm("tx", ["kp"]) == "sig-1"
    manager.client.send_transaction.assert_called_once_with("signed-tx", opts=tx_sender.opts)
    manager.client.confirm_transaction.assert_called_once_with("sig-1", commitment=Confirmed)


def test_send_all_confirms_each_before_next(tx_sender, manager):
    events = []
    manager.client.send_transaction.side_effect = lambda tx, opts: events.append(("send", tx)) or MagicMock(value=tx)
    manager.client.confirm_transaction.side_effect = lambda sig, commitment: events.append(("confirm", sig))

    signatures = tx_sender.send_all(["a", "b"], ["kp"])

    assert signatures == ["signed-a", "signed-b"]
    assert events == [
        ("send", "signed-a"), ("confirm", "signed-a"),
        ("send", "signed-b"), ("confirm", "signed-b"),
    ]


def test_send_all_stops_at_first_failure(tx_sender, manager):
    manager.client.confirm_transaction.side_effect = [None, RuntimeError("not confirmed")]

    with pytest.raises(RuntimeError):
        tx_sender.send_all(["a", "b", "c"], ["kp"])
    assert manager.client.send_transaction.call_count == 2


# ── Versioned signing ──────────────────────────────────────────────────

def position_account_message(payer, position):
    """Message that needs both the payer and a new position keypair to sign"""
    ix = create_account(CreateAccountParams(
        from_pubkey=payer.pubkey(),
        to_pubkey=position.pubkey(),
        lamports=1_000_000,
        space=0,
        owner=Keypair().pubkey(),
    ))
    return MessageV0.try_compile(payer.pubkey(), [ix], [], Hash.default())


def test_versioned_sign_keeps_sdk_cosigner(manager):
    payer, position = Keypair(), Keypair()
    message = position_account_message(payer, position)
    message_bytes = to_bytes_versioned(message)
    position_signature = position.sign_message(message_bytes)
    partially_signed = VersionedTransaction.populate(message, [Signature.default(), position_signature])

    signed = TransactionSender(manager).sign(partially_signed, [payer])

    assert list(signed.signatures) == [payer.sign_message(message_bytes), position_signature]


def test_versioned_sign_requires_every_signer(manager):
    payer, position = Keypair(), Keypair()
    message = position_account_message(payer, position)
    unsigned = VersionedTransaction.populate(message, [Signature.default(), Signature.default()])

    with pytest.raises(ValueError, match="Missing signature"):
        TransactionSender(manager).sign(unsigned, [payer])
