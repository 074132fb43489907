import json
import tempfile
import unittest
from pathlib import Path

from solders.keypair import Keypair

from calculator_client.errors import CredentialLoadError, ProgramResolutionError
from calculator_client.keys import load_keypair, resolve_program_id


def write_keypair(path: Path, keypair: Keypair) -> Path:
    path.write_text(json.dumps(list(bytes(keypair))))
    return path


class LoadKeypairTests(unittest.TestCase):
    def test_loads_solana_keygen_format(self) -> None:
        original = Keypair()
        with tempfile.TemporaryDirectory() as td:
            path = write_keypair(Path(td) / "id.json", original)
            loaded = load_keypair(path)
        self.assertEqual(loaded.pubkey(), original.pubkey())

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaisesRegex(CredentialLoadError, "not found"):
                load_keypair(Path(td) / "absent.json")

    def test_not_json(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "id.json"
            path.write_text("not a key")
            with self.assertRaises(CredentialLoadError):
                load_keypair(path)

    def test_not_utf8(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "id.json"
            path.write_bytes(b"\xff\xfe\x00garbage")
            with self.assertRaisesRegex(CredentialLoadError, "not a JSON array"):
                load_keypair(path)

    def test_wrong_length(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "id.json"
            path.write_text(json.dumps([1] * 32))
            with self.assertRaisesRegex(CredentialLoadError, "expected 64"):
                load_keypair(path)

    def test_non_byte_values(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "id.json"
            path.write_text(json.dumps([256] + [0] * 63))
            with self.assertRaises(CredentialLoadError):
                load_keypair(path)
            path.write_text(json.dumps(["a"] * 64))
            with self.assertRaises(CredentialLoadError):
                load_keypair(path)


class ResolveProgramIdTests(unittest.TestCase):
    def test_literal_program_id_wins(self) -> None:
        program = Keypair().pubkey()
        self.assertEqual(resolve_program_id(str(program), "/does/not/exist.json"), program)

    def test_uses_public_half_of_program_keypair(self) -> None:
        program = Keypair()
        with tempfile.TemporaryDirectory() as td:
            path = write_keypair(Path(td) / "calculator-keypair.json", program)
            self.assertEqual(resolve_program_id(None, path), program.pubkey())

    def test_missing_program_keypair(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(ProgramResolutionError):
                resolve_program_id(None, Path(td) / "calculator-keypair.json")

    def test_invalid_literal(self) -> None:
        with self.assertRaises(ProgramResolutionError):
            resolve_program_id("not-base58!", None)

    def test_nothing_configured(self) -> None:
        with self.assertRaises(ProgramResolutionError):
            resolve_program_id(None, None)


if __name__ == "__main__":
    unittest.main()
