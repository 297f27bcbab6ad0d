import click

from recorder import (
    InvalidSelection,
    SelectionCancelled,
    ValidationError,
    parse_learning_time
)


LEARNING_TIME_PROMPT = "Enter your study time in minutes (ex.1 hour and 10 minutes, enter 70)"


def select_item(values, renderer=str):
    """
    Show a numbered menu and wait for a choice.
    Returns (index, value); index is zero-based.
    """
    if not values:
        raise ValueError("nothing to select")

    for number, value in enumerate(values, start=1):
        click.echo(f"({number}) {renderer(value)}")

    try:
        answer = click.prompt("Select", default="", show_default=False)
    except click.Abort as e:
        raise SelectionCancelled() from e

    # asked once; a bad choice aborts the command
    try:
        number = int(answer)
    except ValueError:
        raise InvalidSelection(f"{answer!r} is not a number.") from None
    if not 1 <= number <= len(values):
        raise InvalidSelection(f"{number} is not in the range 1..{len(values)}.")

    return number - 1, values[number - 1]


def read_learning_time():
    # loops until the answer is valid
    while True:
        try:
            answer = click.prompt(
                LEARNING_TIME_PROMPT,
                default="",
                show_default=False,
                prompt_suffix="\n"
            )
        except click.Abort as e:
            raise SelectionCancelled() from e

        try:
            return parse_learning_time(answer)
        except ValidationError as e:
            click.echo(str(e))
            click.echo("Please re-type.")
