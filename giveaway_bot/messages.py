"""English templates for everything the bot says to users."""

from __future__ import annotations

from typing import Final

from .errors import ErrorKind, GiveawayError

ERROR_TEMPLATES: Final[dict[ErrorKind, str]] = {
    ErrorKind.COOLDOWN_ACTIVE: (
        "Giveaway creation failed recently in this server. "
        "Please wait a few seconds before trying again."
    ),
    ErrorKind.QUOTA_EXCEEDED: (
        "This {scope} already has **{value}** running giveaways "
        "(maximum is {limit}). Wait for one to end before starting another."
    ),
    ErrorKind.INVALID_TIME_FORMAT: (
        "Failed to parse a duration from `{value}`. Try something like `30s`, "
        "`10m`, `2h` or `1d12h`."
    ),
    ErrorKind.TIME_BELOW_MINIMUM: (
        "A duration of {value} seconds is too short; giveaways must last at "
        "least {limit} seconds."
    ),
    ErrorKind.TIME_ABOVE_MAXIMUM: (
        "A duration of {value} seconds is too long; giveaways can last at "
        "most {limit} seconds."
    ),
    ErrorKind.INVALID_WINNERS_FORMAT: "`{value}` is not a valid number of winners.",
    ErrorKind.WINNERS_OUT_OF_RANGE: (
        "{value} is not a valid number of winners; pick a number from "
        "{minimum} to {limit}."
    ),
    ErrorKind.PRIZE_TOO_LONG: "The prize can be at most {limit} characters long.",
    ErrorKind.DESCRIPTION_TOO_LONG: (
        "The description can be at most {limit} characters long."
    ),
    ErrorKind.BOT_LACKS_PERMISSIONS: (
        "I could not post the giveaway. Make sure I can view the channel, "
        "send messages and embed links there."
    ),
    ErrorKind.CREATION_FAILED: "Something went wrong while creating the giveaway.",
}

WINNER_TEMPLATE: Final = "Congratulations {winners}! You won the **{prize}**!"
NO_ENTRIES: Final = "No valid entrants, so a winner could not be determined!"
NO_ENTRIES_SHORT: Final = "No valid entrants"
ENTERED: Final = "You have entered this giveaway!"
ALREADY_ENTERED: Final = "You have already entered this giveaway!"
NOT_RUNNING: Final = "This giveaway has already ended."
CREATED: Final = "Giveaway started! It ends <t:{end}:R>."
SUMMARY_LABEL: Final = "Giveaway Summary"


def render_error(error: GiveawayError) -> str:
    template = ERROR_TEMPLATES[error.kind]
    return template.format(
        value=error.value,
        limit=error.limit,
        minimum=error.minimum,
        scope="channel" if error.per_channel else "server",
    )


def winner_announcement(mentions: str, prize: str) -> str:
    return WINNER_TEMPLATE.format(winners=mentions, prize=prize)


__all__ = [
    "ALREADY_ENTERED",
    "CREATED",
    "ENTERED",
    "ERROR_TEMPLATES",
    "NO_ENTRIES",
    "NO_ENTRIES_SHORT",
    "NOT_RUNNING",
    "SUMMARY_LABEL",
    "WINNER_TEMPLATE",
    "render_error",
    "winner_announcement",
]
