"""Command data model for title sequence scripts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SAVE_INDEX_INVALID = 0xFFFF
USER_STRING_MAX_LENGTH = 128


class TitleScript(Enum):
    """Enumerated kinds of title sequence commands."""

    UNDEFINED = "undefined"
    LOAD = "load"
    LOCATION = "location"
    ROTATE = "rotate"
    ZOOM = "zoom"
    FOLLOW = "follow"
    RESTART = "restart"
    WAIT = "wait"
    LOOP = "loop"
    END_LOOP = "end_loop"
    END = "end"
    SPEED = "speed"
    LOAD_SC = "load_sc"


def mask8(value: int) -> int:
    return value & 0xFF


def mask16(value: int) -> int:
    return value & 0xFFFF


def clamp_speed(value: int) -> int:
    """Mask ``value`` to 8 bits then clamp it into the 1..4 speed range."""

    return max(1, min(4, mask8(value)))


def bounded_copy(value: str, capacity: int = USER_STRING_MAX_LENGTH) -> str:
    """Return ``value`` truncated to fit a buffer of ``capacity`` (with terminator)."""

    return value[: max(capacity - 1, 0)]


@dataclass(frozen=True)
class TitleCommand:
    """A single decoded instruction of a title sequence script.

    Only the fields relevant to ``type`` carry meaning; the others keep their
    defaults. Use the classmethod constructors so numeric fields are masked to
    the widths stored by the script format.
    """

    type: TitleScript
    save_index: int = SAVE_INDEX_INVALID
    x: int = 0
    y: int = 0
    rotations: int = 0
    zoom: int = 0
    speed: int = 0
    sprite_index: int = 0
    sprite_name: str = ""
    milliseconds: int = 0
    scenario: str = ""

    @classmethod
    def load(cls, save_index: int = SAVE_INDEX_INVALID) -> "TitleCommand":
        return cls(TitleScript.LOAD, save_index=save_index)

    @classmethod
    def load_scenario(cls, scenario: str) -> "TitleCommand":
        return cls(TitleScript.LOAD_SC, scenario=bounded_copy(scenario))

    @classmethod
    def location(cls, x: int, y: int) -> "TitleCommand":
        return cls(TitleScript.LOCATION, x=mask8(x), y=mask8(y))

    @classmethod
    def rotate(cls, rotations: int) -> "TitleCommand":
        return cls(TitleScript.ROTATE, rotations=mask8(rotations))

    @classmethod
    def zoom_to(cls, zoom: int) -> "TitleCommand":
        return cls(TitleScript.ZOOM, zoom=mask8(zoom))

    @classmethod
    def set_speed(cls, speed: int) -> "TitleCommand":
        return cls(TitleScript.SPEED, speed=clamp_speed(speed))

    @classmethod
    def follow(cls, sprite_index: int, sprite_name: str = "") -> "TitleCommand":
        return cls(
            TitleScript.FOLLOW,
            sprite_index=mask16(sprite_index),
            sprite_name=bounded_copy(sprite_name),
        )

    @classmethod
    def wait(cls, milliseconds: int) -> "TitleCommand":
        return cls(TitleScript.WAIT, milliseconds=mask16(milliseconds))

    @classmethod
    def restart(cls) -> "TitleCommand":
        return cls(TitleScript.RESTART)

    @classmethod
    def end(cls) -> "TitleCommand":
        return cls(TitleScript.END)

    @property
    def has_valid_save(self) -> bool:
        return self.type is TitleScript.LOAD and self.save_index != SAVE_INDEX_INVALID

    def with_save_index(self, save_index: int) -> "TitleCommand":
        """Return a copy of this ``LOAD`` command pointing at ``save_index``."""

        if self.type is not TitleScript.LOAD:
            raise ValueError("Only LOAD commands reference a save index.")
        return TitleCommand.load(save_index)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the command."""

        payload: dict[str, object] = {"type": self.type.value}
        if self.type is TitleScript.LOAD:
            payload["save_index"] = (
                None if self.save_index == SAVE_INDEX_INVALID else self.save_index
            )
        elif self.type is TitleScript.LOAD_SC:
            payload["scenario"] = self.scenario
        elif self.type is TitleScript.LOCATION:
            payload["x"] = self.x
            payload["y"] = self.y
        elif self.type is TitleScript.ROTATE:
            payload["rotations"] = self.rotations
        elif self.type is TitleScript.ZOOM:
            payload["zoom"] = self.zoom
        elif self.type is TitleScript.SPEED:
            payload["speed"] = self.speed
        elif self.type is TitleScript.FOLLOW:
            payload["sprite_index"] = self.sprite_index
            payload["sprite_name"] = self.sprite_name
        elif self.type is TitleScript.WAIT:
            payload["milliseconds"] = self.milliseconds
        return payload


def is_load_command(command: TitleCommand) -> bool:
    """Return ``True`` when ``command`` replaces the currently loaded park."""

    return command.type in (TitleScript.LOAD, TitleScript.LOAD_SC)


__all__ = [
    "SAVE_INDEX_INVALID",
    "USER_STRING_MAX_LENGTH",
    "TitleCommand",
    "TitleScript",
    "bounded_copy",
    "clamp_speed",
    "is_load_command",
    "mask16",
    "mask8",
]
