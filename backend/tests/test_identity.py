import unittest
from unittest.mock import MagicMock, patch

import requests
from firebase_admin import exceptions

from backend.identity import (
    AdminPolicy,
    EmailAlreadyExistsError,
    FirebaseIdentityProvider,
    IdentityUnavailableError,
    InMemoryIdentityProvider,
    InvalidCredentialsError,
    InvalidTokenError,
)


class AdminPolicyTests(unittest.TestCase):
    def test_allowlist_is_case_insensitive(self):
        policy = AdminPolicy(["Owner@Example.com", " "])
        self.assertTrue(policy.is_admin_email("owner@example.com "))
        self.assertFalse(policy.is_admin_email("other@example.com"))
        self.assertFalse(policy.is_admin_email(None))

    def test_empty_allowlist(self):
        self.assertFalse(AdminPolicy().is_admin_email("owner@example.com"))


class InMemoryIdentityProviderTests(unittest.TestCase):
    def setUp(self):
        self.provider = InMemoryIdentityProvider()

    def test_sign_up_sign_in_and_verify(self):
        session = self.provider.sign_up("ann@example.com", "secret1", "Ann")
        self.assertEqual(self.provider.verify_token(session.id_token), session.identity)

        again = self.provider.sign_in_with_password("ANN@example.com", "secret1")
        self.assertEqual(again.identity.uid, session.identity.uid)
        self.assertEqual(self.provider.get_user(session.identity.uid).display_name, "Ann")

    def test_errors(self):
        self.provider.sign_up("ann@example.com", "secret1")
        with self.assertRaises(EmailAlreadyExistsError):
            self.provider.sign_up("ann@example.com", "other12")
        with self.assertRaises(InvalidCredentialsError):
            self.provider.sign_in_with_password("ann@example.com", "wrong")
        with self.assertRaises(InvalidTokenError):
            self.provider.verify_token("nope")

    def test_revoked_token(self):
        session = self.provider.sign_up("ann@example.com", "secret1")
        self.provider.revoke(session.id_token)
        with self.assertRaises(InvalidTokenError):
            self.provider.verify_token(session.id_token)


class FirebaseIdentityProviderTests(unittest.TestCase):
    def setUp(self):
        self.provider = FirebaseIdentityProvider("web-key")

    @patch("backend.identity.requests.post")
    def test_sign_in_success(self, mock_post):
        mock_post.return_value = MagicMock(
            status_code=200,
            json=MagicMock(
                return_value={"localId": "uid-1", "email": "a@example.com", "idToken": "tok"}
            ),
        )
        session = self.provider.sign_in_with_password("a@example.com", "secret1")
        self.assertEqual(session.identity.uid, "uid-1")
        self.assertEqual(session.id_token, "tok")
        self.assertEqual(mock_post.call_args.kwargs["params"], {"key": "web-key"})

    @patch("backend.identity.requests.post")
    def test_sign_in_bad_password(self, mock_post):
        mock_post.return_value = MagicMock(
            status_code=400,
            json=MagicMock(return_value={"error": {"message": "INVALID_PASSWORD"}}),
        )
        with self.assertRaises(InvalidCredentialsError) as ctx:
            self.provider.sign_in_with_password("a@example.com", "wrong")
        self.assertEqual(str(ctx.exception), "Invalid email or password")

    @patch("backend.identity.requests.post")
    def test_sign_in_unreachable(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("down")
        with self.assertRaises(IdentityUnavailableError):
            self.provider.sign_in_with_password("a@example.com", "secret1")

    @patch("backend.identity.requests.post")
    def test_sign_in_non_json_error_body(self, mock_post):
        mock_post.return_value = MagicMock(
            status_code=502,
            json=MagicMock(side_effect=ValueError("Expecting value")),
        )
        with self.assertLogs("backend.identity", level="WARNING"):
            with self.assertRaises(IdentityUnavailableError):
                self.provider.sign_in_with_password("a@example.com", "secret1")

    @patch("backend.identity.requests.post")
    def test_sign_in_server_error(self, mock_post):
        mock_post.return_value = MagicMock(
            status_code=503,
            json=MagicMock(return_value={"error": {"message": "BACKEND_ERROR"}}),
        )
        with self.assertRaises(IdentityUnavailableError):
            self.provider.sign_in_with_password("a@example.com", "secret1")

    @patch("firebase_admin.auth.create_user")
    def test_sign_up_invalid_email(self, mock_create):
        mock_create.side_effect = ValueError('Malformed email address string: "nope".')
        with self.assertRaises(InvalidCredentialsError):
            self.provider.sign_up("nope", "secret1")

    @patch("firebase_admin.auth.create_user")
    def test_sign_up_invalid_argument_from_server(self, mock_create):
        mock_create.side_effect = exceptions.InvalidArgumentError("INVALID_EMAIL")
        with self.assertRaises(InvalidCredentialsError):
            self.provider.sign_up("a@example", "secret1")

    @patch("firebase_admin.auth.create_user")
    def test_sign_up_backend_failure(self, mock_create):
        mock_create.side_effect = exceptions.UnavailableError("backend down")
        with self.assertLogs("backend.identity", level="WARNING"):
            with self.assertRaises(IdentityUnavailableError):
                self.provider.sign_up("a@example.com", "secret1")

    def test_sign_in_without_api_key(self):
        with self.assertRaises(IdentityUnavailableError):
            FirebaseIdentityProvider(None).sign_in_with_password("a@example.com", "x")

    @patch("firebase_admin.auth.verify_id_token")
    def test_verify_token(self, mock_verify):
        mock_verify.return_value = {"uid": "uid-1", "email": "a@example.com", "name": "Ann"}
        identity = self.provider.verify_token("tok")
        self.assertEqual(identity.uid, "uid-1")
        self.assertEqual(identity.display_name, "Ann")

    @patch("firebase_admin.auth.verify_id_token")
    def test_verify_token_invalid(self, mock_verify):
        mock_verify.side_effect = ValueError("malformed")
        with self.assertRaises(InvalidTokenError):
            self.provider.verify_token("tok")


if __name__ == "__main__":
    unittest.main()
