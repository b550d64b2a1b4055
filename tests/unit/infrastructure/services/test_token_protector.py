import pytest

from authlink.core.exceptions import ConfigurationError, DecryptionError
from authlink.infrastructure.services.authentication import FernetTokenProtector
from tests.utils.keys import TEST_ENCRYPTION_KEY


def test_round_trip(token_protector):
    ciphertext = token_protector.protect("ya29.provider-access-token")

    assert ciphertext != "ya29.provider-access-token"
    assert token_protector.unprotect(ciphertext) == "ya29.provider-access-token"


def test_same_plaintext_encrypts_differently(token_protector):
    assert token_protector.protect("token") != token_protector.protect("token")


def test_purpose_isolation():
    calendar = FernetTokenProtector(TEST_ENCRYPTION_KEY, purpose="calendar.v1")
    refresh = FernetTokenProtector(TEST_ENCRYPTION_KEY, purpose="refresh.v1")

    with pytest.raises(DecryptionError):
        refresh.unprotect(calendar.protect("secret"))


def test_different_master_key_cannot_decrypt(token_protector):
    other = FernetTokenProtector("another-master-key")
    with pytest.raises(DecryptionError):
        other.unprotect(token_protector.protect("secret"))


def test_tampered_ciphertext_is_rejected(token_protector):
    ciphertext = token_protector.protect("secret")
    tampered = ciphertext[:-4] + ("AAAA" if not ciphertext.endswith("AAAA") else "BBBB")
    with pytest.raises(DecryptionError):
        token_protector.unprotect(tampered)


def test_garbage_is_rejected(token_protector):
    with pytest.raises(DecryptionError):
        token_protector.unprotect("definitely not fernet")


@pytest.mark.parametrize("method", ["protect", "unprotect"])
def test_blank_input_is_rejected(token_protector, method):
    with pytest.raises(ValueError):
        getattr(token_protector, method)("")


@pytest.mark.parametrize("key", ["", "  ", None])
def test_missing_master_key(key):
    with pytest.raises(ConfigurationError):
        FernetTokenProtector(key)
