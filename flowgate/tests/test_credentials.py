"""Tests for stored-credential encryption and basic-auth helpers."""

from flowgate.credentials import (
    basic_auth_header,
    basic_auth_token,
    decrypt_password,
    encrypt_password,
)
from flowgate.database.models import AnalysisServer


class TestPasswordEncryption:
    def test_encrypt_then_decrypt(self):
        token = encrypt_password("s3cr3t-pw")
        assert token != "s3cr3t-pw"
        assert decrypt_password(token) == "s3cr3t-pw"

    def test_encryption_is_deterministic(self):
        # fixed key and IV, so stored values can be compared
        assert encrypt_password("abc") == encrypt_password("abc")

    def test_decrypt_none(self):
        assert decrypt_password(None) is None

    def test_decrypt_invalid_token_returns_none(self):
        assert decrypt_password("abc") is None


class TestBasicAuth:
    def test_token(self):
        assert basic_auth_token("user", "pw") == "dXNlcjpwdw=="

    def test_header(self):
        assert basic_auth_header("user", "pw") == "Basic dXNlcjpwdw=="

    def test_missing_password_encodes_empty(self):
        assert basic_auth_token("user", None) == basic_auth_token("user", "")


class TestServerPassword:
    def test_password_stored_encrypted(self):
        server = AnalysisServer(name="gp", url="https://gp.example.org")
        server.password = "hunter2"
        assert server.user_pw != "hunter2"
        assert server.password == "hunter2"

    def test_empty_password(self):
        server = AnalysisServer(name="gp", url="https://gp.example.org")
        server.password = ""
        assert server.user_pw is None
        assert server.password == ""
