from types import SimpleNamespace

from app.core.security import create_access_token, hash_password, sign, verify, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("segredo")
    assert hashed != "segredo"
    assert verify_password("segredo", hashed)
    assert not verify_password("errado", hashed)


def test_verify_password_with_garbage_hash():
    assert verify_password("segredo", "not-a-bcrypt-hash") is False


def test_sign_and_verify():
    token = sign({"id": 7, "role": "user"}, secret="k1", ttl_seconds=60)
    claims = verify(token, "k1")
    assert claims["id"] == 7
    assert claims["role"] == "user"
    assert claims["exp"] > claims["iat"]


def test_verify_rejects_wrong_secret_and_tampering():
    token = sign({"id": 7}, secret="k1")
    assert verify(token, "k2") is None
    assert verify(token[:-2] + "xx", "k1") is None
    assert verify("not.a.token", "k1") is None


def test_verify_rejects_expired_token():
    token = sign({"id": 7}, secret="k1", ttl_seconds=-10)
    assert verify(token, "k1") is None


def test_access_token_claims():
    user = SimpleNamespace(id=3, name="Maria", role="professor")
    claims = verify(create_access_token(user), "test-secret-key")
    assert claims["sub"] == "3"
    assert (claims["id"], claims["name"], claims["role"]) == (3, "Maria", "professor")
    assert claims["exp"] - claims["iat"] == 60 * 60
