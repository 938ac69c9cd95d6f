"""Unit tests for gatekeep.core.security: password policy, hashing, identity transforms."""

import unittest

from gatekeep.core.security import (
    device_fingerprint,
    generate_session_token,
    hash_password,
    hash_session_token,
    hash_source_address,
    is_valid_email,
    normalize_email,
    password_policy_errors,
    verify_password,
)


class TestPasswordPolicy(unittest.TestCase):
    def test_valid_password_has_no_errors(self) -> None:
        self.assertEqual(password_policy_errors("Abc12345!"), [])

    def test_reports_every_missing_class(self) -> None:
        errors = password_policy_errors("abc")
        self.assertEqual(len(errors), 4)  # length, uppercase, digit, symbol

    def test_length_bounds(self) -> None:
        self.assertEqual(password_policy_errors("Ab1!efgh"), [])
        self.assertIn("Password must be at least 8 characters", password_policy_errors("Ab1!efg"))
        too_long = "Ab1!" + "x" * 125
        self.assertIn("Password must be at most 128 characters", password_policy_errors(too_long))

    def test_symbol_must_come_from_allowed_set(self) -> None:
        # Non-ASCII punctuation does not count as a symbol.
        errors = password_policy_errors("Abc12345§")
        self.assertIn("Password must include at least 1 symbol", errors)

    def test_non_string_password(self) -> None:
        self.assertEqual(password_policy_errors(None), ["Password must be a string"])  # type: ignore[arg-type]


class TestEmail(unittest.TestCase):
    def test_normalize_trims_and_lowercases(self) -> None:
        self.assertEqual(normalize_email("  Ann@Example.COM "), "ann@example.com")

    def test_valid_and_invalid_addresses(self) -> None:
        self.assertTrue(is_valid_email("ann@example.com"))
        self.assertFalse(is_valid_email("ann@example"))
        self.assertFalse(is_valid_email("not-an-email"))
        self.assertFalse(is_valid_email(""))
        self.assertFalse(is_valid_email("a" * 250 + "@x.io"))


class TestHashing(unittest.TestCase):
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("Abc12345!", rounds=4)
        self.assertNotEqual(hashed, "Abc12345!")
        self.assertTrue(verify_password("Abc12345!", hashed))
        self.assertFalse(verify_password("Abc12345?", hashed))

    def test_verify_against_garbage_hash_is_false(self) -> None:
        self.assertFalse(verify_password("Abc12345!", "not-a-bcrypt-hash"))

    def test_session_token_is_random_and_hashed(self) -> None:
        a, b = generate_session_token(), generate_session_token()
        self.assertNotEqual(a, b)
        self.assertGreaterEqual(len(a), 43)
        self.assertEqual(len(hash_session_token(a)), 64)
        self.assertEqual(hash_session_token(a), hash_session_token(a))


class TestIdentityTransforms(unittest.TestCase):
    def test_address_hash_groups_equal_addresses(self) -> None:
        h1 = hash_source_address("203.0.113.7", "secret")
        h2 = hash_source_address("203.0.113.7", "secret")
        self.assertEqual(h1, h2)
        self.assertNotIn("203.0.113.7", h1)

    def test_address_hash_depends_on_key(self) -> None:
        self.assertNotEqual(
            hash_source_address("203.0.113.7", "k1"),
            hash_source_address("203.0.113.7", "k2"),
        )

    def test_missing_address_still_hashes(self) -> None:
        self.assertEqual(len(hash_source_address(None, "secret")), 64)

    def test_fingerprint_changes_with_headers(self) -> None:
        base = device_fingerprint("Mozilla/5.0", "en-US", "gzip")
        self.assertEqual(base, device_fingerprint("Mozilla/5.0", "en-US", "gzip"))
        self.assertNotEqual(base, device_fingerprint("Mozilla/5.0", "de-DE", "gzip"))
        self.assertNotIn("Mozilla", base)


if __name__ == "__main__":
    unittest.main()
