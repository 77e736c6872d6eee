import pytest

from models.session_models import AspectRatio
from services.openai.size_tokens import SIZE_TOKENS, from_size_token, to_size_token


@pytest.mark.parametrize("ratio", list(AspectRatio))
def test_every_ratio_round_trips_through_size_token(ratio):
    assert from_size_token(to_size_token(ratio)) is ratio


def test_string_ratios_map_to_provider_tokens():
    assert to_size_token("16:9") == "16x9"
    assert to_size_token("21:9") == "21x9"
    assert to_size_token(AspectRatio.PORTRAIT) == "9x16"


@pytest.mark.parametrize("ratio", ["7:5", "", None, "square"])
def test_unknown_ratios_default_to_square(ratio):
    assert to_size_token(ratio) == "1x1"


def test_table_covers_every_ratio():
    assert set(SIZE_TOKENS) == {ratio.value for ratio in AspectRatio}


def test_unknown_size_token_is_rejected():
    with pytest.raises(ValueError):
        from_size_token("1024x1024")
