import click
from flask import Flask, current_app
from flask.cli import FlaskGroup, with_appcontext
from functools import wraps
import os

from database import db
from recorder import (
    DEFAULT_GENRES,
    InvalidSelection,
    NoRowsError,
    Recorder,
    SelectionCancelled,
    StorageError,
    date_label,
    format_hours,
    shape_row,
    storage_errors
)
import prompts


# -------------------------------------------------
# APP SETUP
# -------------------------------------------------
def create_app(test_config=None):
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(
        os.getcwd(), "learning.sqlite3"
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["GENRES"] = list(DEFAULT_GENRES)
    app.config["DATES_RANGE"] = 7
    app.config["DISPLAY_LIMIT"] = 20
    app.config["PRO_HOURS"] = 10000

    # e.g. LEARNING_GENRES='["python", "sql"]'
    app.config.from_prefixed_env("LEARNING")
    if test_config is not None:
        app.config.update(test_config)

    db.init_app(app)
    with app.app_context():
        try:
            with storage_errors():
                db.create_all()
        except StorageError as e:
            app.logger.error("cannot open %s: %s", app.config["SQLALCHEMY_DATABASE_URI"], e)
            raise

    return app


# -------------------------------------------------
# HELPERS
# -------------------------------------------------
RULE = "/" * 60


def recorder_command(f):
    """Turn recorder errors into exit status 1."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SelectionCancelled:
            click.echo("cancelled")
            current_app.logger.info("%s cancelled", f.__name__)
        except InvalidSelection as e:
            current_app.logger.warning("%s aborted: %s", f.__name__, e)
        except NoRowsError as e:
            current_app.logger.info("%s: %s", f.__name__, e)
        except StorageError as e:
            current_app.logger.error("%s failed: %s", f.__name__, e)
        click.get_current_context().exit(1)
    return wrapper


def get_recorder():
    return Recorder.from_config(current_app.config)


def prompt_property(recorder):
    click.echo("Choose a date of learning.")
    _, learning_date = prompts.select_item(recorder.date_choices(), date_label)
    click.secho(date_label(learning_date), fg="yellow")

    click.echo("Choose a genre of learning.")
    _, genre = prompts.select_item(recorder.genres)
    click.secho(genre, fg="yellow")

    learning_time = prompts.read_learning_time()
    click.secho(str(learning_time), fg="yellow")

    return learning_date, genre, learning_time


def choose_entry(recorder):
    entries = recorder.recent_entries()
    index, line = prompts.select_item([shape_row(e) for e in entries])
    click.secho(line, fg="yellow")
    # the selected row's id goes straight to the mutation
    return entries[index]


def print_genre_report(recorder):
    totals, total_hours = recorder.totals_by_genre()

    click.secho(RULE, fg="magenta")
    click.echo()
    click.echo("Your total study time (hours)")
    click.echo()
    for genre, hours in totals:
        click.echo(genre.ljust(15) + format_hours(hours) + " hours")

    click.echo("-" * 28)
    click.echo("total".ljust(15) + format_hours(total_hours) + " hours")
    click.echo()
    remaining = format_hours(recorder.remaining_hours(total_hours))
    click.echo(
        "Your time of study remaining to be pro is "
        + click.style(remaining, fg="magenta")
        + " hours."
    )
    click.echo("Keep studying is the key to success!!")
    click.echo()
    click.secho(RULE, fg="magenta")


def print_daily_report(recorder):
    click.echo("Your total study time in a day (hours)")
    click.echo()
    for day, genres, hours in recorder.totals_by_day():
        click.echo(f"{day:<15} {genres:<15} {format_hours(hours)} hours")


# -------------------------------------------------
# COMMANDS
# -------------------------------------------------
DAILY_FLAGS = ("-d", "--daily")


def show_args(args):
    return ["show"] + [a for a in args if a in DAILY_FLAGS]


class RecorderGroup(FlaskGroup):
    def _is_group_option(self, ctx, arg):
        name = arg.split("=", 1)[0]
        return any(
            name in param.opts or name in param.secondary_opts
            for param in self.get_params(ctx)
        )

    def parse_args(self, ctx, args):
        # anything that is not a known command falls back to `show`
        if args and args[0] not in self.commands and not self._is_group_option(ctx, args[0]):
            args = show_args(args)
        return super().parse_args(ctx, args)

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            return "show", self.get_command(ctx, "show"), show_args(args[1:])[1:]
        return super().resolve_command(ctx, args)


def load_app():
    try:
        return create_app()
    except StorageError:
        click.get_current_context().exit(1)


@click.group(
    cls=RecorderGroup,
    create_app=load_app,
    add_default_commands=False,
    add_version_option=False,
    invoke_without_command=True
)
@click.pass_context
def cli(ctx):
    """Record the minutes you spend learning."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@cli.command()
@with_appcontext
@recorder_command
def create():
    """Add a study session."""
    recorder = get_recorder()
    learning_date, genre, learning_time = prompt_property(recorder)

    entry = recorder.create(learning_date, genre, learning_time)
    current_app.logger.info("created entry %s", entry.id)
    click.secho("Created successfully!", fg="yellow")


@cli.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
@click.option("-d", "--daily", is_flag=True, help="Totals per day instead of per genre.")
@with_appcontext
@recorder_command
def show(daily):
    """Print total study time."""
    recorder = get_recorder()
    if daily:
        print_daily_report(recorder)
    else:
        print_genre_report(recorder)


@cli.command()
@with_appcontext
@recorder_command
def edit():
    """Rewrite a recent study session."""
    recorder = get_recorder()
    click.echo("Choose a date to edit.")
    entry = choose_entry(recorder)

    learning_date, genre, learning_time = prompt_property(recorder)
    recorder.update(entry, learning_date, genre, learning_time)
    current_app.logger.info("edited entry %s", entry.id)
    click.secho("Edited successfully!", fg="yellow")


@cli.command()
@with_appcontext
@recorder_command
def delete():
    """Remove a recent study session."""
    recorder = get_recorder()
    click.echo("Choose a date to delete.")
    entry = choose_entry(recorder)

    entry_id = entry.id
    recorder.delete(entry)
    current_app.logger.info("deleted entry %s", entry_id)
    click.secho("Deleted successfully", fg="yellow")


# -------------------------------------------------
# MAIN
# -------------------------------------------------
if __name__ == "__main__":
    cli()
