import pytest

from titlesequence.commands import (
    SAVE_INDEX_INVALID,
    USER_STRING_MAX_LENGTH,
    TitleCommand,
    TitleScript,
    is_load_command,
)


def test_is_load_command_covers_saves_and_scenarios() -> None:
    assert is_load_command(TitleCommand.load(0))
    assert is_load_command(TitleCommand.load_scenario("Forest Frontiers"))
    assert not is_load_command(TitleCommand.wait(10))
    assert not is_load_command(TitleCommand.end())


def test_constructors_mask_numeric_fields() -> None:
    assert TitleCommand.location(256, 511) == TitleCommand(
        TitleScript.LOCATION, x=0, y=255
    )
    assert TitleCommand.wait(65536).milliseconds == 0
    assert TitleCommand.set_speed(0).speed == 1
    assert TitleCommand.set_speed(100).speed == 4


def test_free_text_fields_use_bounded_copy() -> None:
    long_name = "n" * 400
    assert len(TitleCommand.follow(1, long_name).sprite_name) == USER_STRING_MAX_LENGTH - 1
    assert len(TitleCommand.load_scenario(long_name).scenario) == USER_STRING_MAX_LENGTH - 1


def test_with_save_index_only_applies_to_loads() -> None:
    assert TitleCommand.load(3).with_save_index(2) == TitleCommand.load(2)
    with pytest.raises(ValueError):
        TitleCommand.rotate(1).with_save_index(0)


def test_has_valid_save() -> None:
    assert TitleCommand.load(0).has_valid_save
    assert not TitleCommand.load(SAVE_INDEX_INVALID).has_valid_save
    assert not TitleCommand.end().has_valid_save


def test_to_payload_includes_only_relevant_fields() -> None:
    assert TitleCommand.load(SAVE_INDEX_INVALID).to_payload() == {
        "type": "load",
        "save_index": None,
    }
    assert TitleCommand.follow(7, "Guest 7").to_payload() == {
        "type": "follow",
        "sprite_index": 7,
        "sprite_name": "Guest 7",
    }
    assert TitleCommand.restart().to_payload() == {"type": "restart"}
