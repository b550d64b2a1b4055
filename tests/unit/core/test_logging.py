import pytest

from authlink.core.logging import mask_identifier


@pytest.mark.parametrize(
    "value,expected",
    [
        ("alice@example.com", "al***"),
        ("a", "a***"),
        ("", "***"),
        (None, "***"),
    ],
)
def test_mask_identifier(value, expected):
    assert mask_identifier(value) == expected
