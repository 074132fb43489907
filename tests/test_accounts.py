import unittest
from types import SimpleNamespace
from unittest.mock import Mock

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from calculator_client.accounts import (
    ClientAccount,
    create_client_account_instruction,
    derive_client_address,
    ensure_provisioned,
)
from calculator_client.errors import CredentialLoadError
from calculator_client.instruction import ACCUMULATOR_SIZE
from calculator_client.session import RemoteSession

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")


class FakeLedger:
    """Remembers accounts created through submitted transactions."""

    def __init__(self) -> None:
        self.accounts = {}
        self.submitted = []

    def fetch_account(self, address):
        return self.accounts.get(address)

    def submit(self, instructions, signers):
        self.submitted.append((list(instructions), list(signers)))
        ix = instructions[0]
        created = ix.accounts[1].pubkey
        space = int.from_bytes(bytes(ix.data)[-40:-32], "little")
        owner = Pubkey.from_bytes(bytes(ix.data)[-32:])
        self.accounts[created] = SimpleNamespace(owner=owner, data=bytes(space), lamports=1)
        return "sig"


class DeriveAddressTests(unittest.TestCase):
    def test_deterministic(self) -> None:
        base = Keypair().pubkey()
        program = Keypair().pubkey()
        first = derive_client_address(base, "test1", program)
        self.assertEqual(first, derive_client_address(base, "test1", program))
        self.assertEqual(first, Pubkey.create_with_seed(base, "test1", program))

    def test_distinct_inputs_give_distinct_addresses(self) -> None:
        base = Keypair().pubkey()
        program = Keypair().pubkey()
        addresses = {
            derive_client_address(base, "test1", program),
            derive_client_address(base, "test2", program),
            derive_client_address(Keypair().pubkey(), "test1", program),
            derive_client_address(base, "test1", Keypair().pubkey()),
        }
        self.assertEqual(len(addresses), 4)

    def test_rejects_oversized_seed(self) -> None:
        with self.assertRaises(CredentialLoadError):
            derive_client_address(Keypair().pubkey(), "s" * 33, Keypair().pubkey())


class CreateAccountInstructionTests(unittest.TestCase):
    def test_system_create_with_seed(self) -> None:
        base = Keypair().pubkey()
        program = Keypair().pubkey()
        ix = create_client_account_instruction(base, "test1", program, ACCUMULATOR_SIZE, 1_000)
        self.assertEqual(ix.program_id, SYSTEM_PROGRAM_ID)
        self.assertEqual(ix.accounts[0].pubkey, base)
        self.assertTrue(ix.accounts[0].is_signer)
        self.assertEqual(ix.accounts[1].pubkey, derive_client_address(base, "test1", program))
        data = bytes(ix.data)
        self.assertEqual(int.from_bytes(data[-40:-32], "little"), ACCUMULATOR_SIZE)
        self.assertEqual(int.from_bytes(data[-48:-40], "little"), 1_000)
        self.assertEqual(Pubkey.from_bytes(data[-32:]), program)


class EnsureProvisionedTests(unittest.TestCase):
    def setUp(self) -> None:
        self.base = Keypair()
        self.program = Keypair().pubkey()
        self.address = derive_client_address(self.base.pubkey(), "test1", self.program)

    def test_existing_account_submits_nothing(self) -> None:
        session = Mock(spec=RemoteSession)
        session.fetch_account.return_value = SimpleNamespace(
            owner=self.program, data=bytes(ACCUMULATOR_SIZE), lamports=10
        )
        account = ensure_provisioned(session, self.base, "test1", self.program, ACCUMULATOR_SIZE, 1_000)
        self.assertEqual(account, ClientAccount(self.address, self.program, ACCUMULATOR_SIZE))
        session.fetch_account.assert_called_once_with(self.address)
        session.submit.assert_not_called()

    def test_absent_account_is_created_once(self) -> None:
        session = Mock(spec=RemoteSession)
        session.fetch_account.return_value = None
        account = ensure_provisioned(session, self.base, "test1", self.program, ACCUMULATOR_SIZE, 1_000)
        self.assertEqual(account.address, self.address)
        self.assertEqual(account.storage_size, ACCUMULATOR_SIZE)
        session.submit.assert_called_once()
        instructions, signers = session.submit.call_args.args
        self.assertEqual(len(instructions), 1)
        self.assertEqual(instructions[0].accounts[1].pubkey, self.address)
        self.assertEqual(signers, [self.base])

    def test_repeat_calls_create_one_account(self) -> None:
        ledger = FakeLedger()
        first = ensure_provisioned(ledger, self.base, "test1", self.program, ACCUMULATOR_SIZE, 1_000)
        second = ensure_provisioned(ledger, self.base, "test1", self.program, ACCUMULATOR_SIZE, 1_000)
        self.assertEqual(len(ledger.submitted), 1)
        self.assertEqual(first, second)
        self.assertEqual(second.storage_size, ACCUMULATOR_SIZE)
        self.assertEqual(second.owner, self.program)


if __name__ == "__main__":
    unittest.main()
