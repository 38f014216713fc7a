import base64
import hashlib
import unittest

from auth.pkce import CHALLENGE_METHOD, code_challenge_for, generate_pkce_pair


class PKCEPairTests(unittest.TestCase):
    def test_verifier_is_43_urlsafe_characters_without_padding(self) -> None:
        pair = generate_pkce_pair()

        self.assertEqual(43, len(pair.verifier))
        self.assertNotIn("=", pair.verifier)
        self.assertNotIn("+", pair.verifier)
        self.assertNotIn("/", pair.verifier)

    def test_challenge_is_sha256_of_verifier(self) -> None:
        pair = generate_pkce_pair()
        expected = base64.urlsafe_b64encode(
            hashlib.sha256(pair.verifier.encode("ascii")).digest()
        ).decode("ascii").rstrip("=")

        self.assertEqual(expected, pair.challenge)
        self.assertEqual(expected, code_challenge_for(pair.verifier))
        self.assertEqual("S256", CHALLENGE_METHOD)

    def test_known_vector_from_rfc7636(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        self.assertEqual(
            "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
            code_challenge_for(verifier),
        )

    def test_each_pair_is_fresh(self) -> None:
        verifiers = {generate_pkce_pair().verifier for _ in range(20)}
        self.assertEqual(20, len(verifiers))


if __name__ == "__main__":
    unittest.main()
