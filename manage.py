#!/usr/bin/env python3
"""
Last Man Standing Management CLI

This script provides command-line management functionality for the Last Man Standing application.
"""

import json
import logging
import os

import click
from flask.cli import with_appcontext
from flask_migrate import downgrade, migrate, upgrade
from flask_migrate import init as flask_migrate_init
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lastman import create_app, db
from lastman.models import (
    AuditLog,
    Competition,
    CompetitionPlayer,
    Fixture,
    Pick,
    PlayerProgress,
    Round,
    User,
)
from lastman.services.errors import SettlementError
from lastman.services.fixture_service import set_fixture_result
from lastman.services.settlement_service import get_round_status, settle_round


@click.group()
def cli():
    """Last Man Standing Management CLI"""
    pass


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("username")
@click.argument("email")
@click.option("--display-name", help="Display name")
@with_appcontext
def create_user(username, email, display_name=None):
    """Create a user and print their API token"""
    try:
        new_user = User(username=username, email=email)
        new_user.set_display_name(display_name or username)
        token = new_user.generate_api_token()
        db.session.add(new_user)
        db.session.commit()

        click.echo(f"✅ Created user {username} (id {new_user.id})")
        click.echo(f"   API token: {token}")

    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"❌ User {username} or {email} already exists!")
        logging.error(f"User creation failed - integrity error: {e}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating user: {str(e)}")
        logging.error(f"User creation failed - SQL error: {e}")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    for u in users:
        click.echo(f"  {u.id}: {u.username} <{u.email}>")


# Competition Commands
@cli.group()
def competition():
    """Competition management commands"""
    pass


@competition.command("create")
@click.argument("name")
@click.option("--organiser", "organiser_id", type=int, required=True, help="Organiser user id")
@click.option("--lives", type=int, default=None, help="Lives per player")
@with_appcontext
def create_competition(name, organiser_id, lives):
    """Create a competition"""
    from flask import current_app

    if db.session.get(User, organiser_id) is None:
        click.echo(f"❌ User {organiser_id} not found!")
        return

    try:
        comp = Competition(
            name=name,
            organiser_id=organiser_id,
            lives_per_player=lives or current_app.config["DEFAULT_LIVES_PER_PLAYER"],
        )
        db.session.add(comp)
        db.session.commit()
        click.echo(f"✅ Created competition {name} (id {comp.id})")

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating competition: {str(e)}")
        logging.error(f"Competition creation failed - SQL error: {e}")


@competition.command("join")
@click.argument("competition_id", type=int)
@click.argument("user_id", type=int)
@with_appcontext
def join_competition(competition_id, user_id):
    """Add a player to a competition"""
    comp = db.session.get(Competition, competition_id)
    if not comp:
        click.echo(f"❌ Competition {competition_id} not found!")
        return

    try:
        player = comp.add_player(user_id)
        db.session.commit()
        click.echo(
            f"✅ User {user_id} joined {comp.name} with {player.lives_remaining} lives"
        )

    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"❌ User {user_id} cannot join competition {competition_id}")
        logging.error(f"Join failed - integrity error: {e}")


@competition.command("players")
@click.argument("competition_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print players as JSON")
@with_appcontext
def list_players(competition_id, as_json):
    """List players and their lives"""
    players = [
        p.to_dict()
        for p in CompetitionPlayer.query.filter_by(competition_id=competition_id)
        .order_by(CompetitionPlayer.user_id)
        .all()
    ]

    if as_json:
        click.echo(json.dumps(players, indent=2))
        return

    if not players:
        click.echo("No players found.")
        return

    for p in players:
        marker = "🟢" if p["status"] == CompetitionPlayer.STATUS_ACTIVE else "❌"
        click.echo(
            f"  {marker} user {p['user_id']}: {p['lives_remaining']} lives "
            f"({p['status']}) {p['user']['display_name']}"
        )


@competition.command("audit")
@click.argument("competition_id", type=int)
@with_appcontext
def show_audit(competition_id):
    """Show the audit trail for a competition"""
    entries = (
        AuditLog.query.filter_by(competition_id=competition_id)
        .order_by(AuditLog.id)
        .all()
    )

    if not entries:
        click.echo("No audit entries found.")
        return

    for entry in entries:
        data = entry.to_dict()
        click.echo(f"  [{data['created_at']}] {data['action']}: {data['details']}")


# Round Commands
@cli.group("round")
def round_cmd():
    """Round management commands"""
    pass


@round_cmd.command("create")
@click.argument("competition_id", type=int)
@with_appcontext
def create_round(competition_id):
    """Create the next round of a competition"""
    comp = db.session.get(Competition, competition_id)
    if not comp:
        click.echo(f"❌ Competition {competition_id} not found!")
        return

    new_round = Round.create_round(comp)
    db.session.commit()
    click.echo(f"✅ Created round {new_round.round_number} (id {new_round.id})")


@round_cmd.command("status")
@click.argument("round_id", type=int)
@click.option("--user", "user_id", type=int, required=True, help="Requesting user id")
@with_appcontext
def round_status(round_id, user_id):
    """Show settlement progress for a round"""
    try:
        status = get_round_status(round_id, user_id)
    except SettlementError as e:
        click.echo(f"❌ {e.return_code}: {e.message}")
        return

    info = status["round_info"]
    click.echo(
        f"Round {info['round_number']} ({info['state']}): "
        f"{info['fixtures_with_results']}/{info['total_fixtures']} resulted, "
        f"{info['calculated_fixtures']} calculated"
    )
    for fixture in status["calculated_fixtures"]:
        click.echo(
            f"  {fixture['home_team_short']} v {fixture['away_team_short']}: {fixture['result']}"
        )


@round_cmd.command("history")
@click.argument("round_id", type=int)
@with_appcontext
def round_history(round_id):
    """Show each player's recorded pick and outcome for a round"""
    rows = (
        PlayerProgress.query.filter_by(round_id=round_id)
        .order_by(PlayerProgress.player_id)
        .all()
    )

    if not rows:
        click.echo("No history recorded for this round.")
        return

    for row in rows:
        data = row.to_dict()
        click.echo(
            f"  user {data['player_id']}: {data['chosen_team'] or '-'} {data['outcome']}"
        )


# Fixture Commands
@cli.group()
def fixture():
    """Fixture management commands"""
    pass


@fixture.command("add")
@click.argument("round_id", type=int)
@click.argument("home_team")
@click.argument("home_short")
@click.argument("away_team")
@click.argument("away_short")
@with_appcontext
def add_fixture(round_id, home_team, home_short, away_team, away_short):
    """Add a fixture to a round"""
    if db.session.get(Round, round_id) is None:
        click.echo(f"❌ Round {round_id} not found!")
        return

    new_fixture = Fixture(
        round_id=round_id,
        home_team=home_team,
        home_team_short=home_short.upper(),
        away_team=away_team,
        away_team_short=away_short.upper(),
    )
    db.session.add(new_fixture)
    db.session.commit()
    click.echo(f"✅ Added {new_fixture.home_team_short} v {new_fixture.away_team_short} (id {new_fixture.id})")


@fixture.command("result")
@click.argument("fixture_id", type=int)
@click.argument("kind", type=click.Choice(Fixture.RESULT_KINDS))
@click.option("--organiser", "organiser_id", type=int, required=True, help="Organiser user id")
@with_appcontext
def fixture_result(fixture_id, kind, organiser_id):
    """Record a fixture result"""
    try:
        updated = set_fixture_result(fixture_id, kind, organiser_id)
        click.echo(f"✅ Fixture {updated.id} result: {updated.result}")
    except SettlementError as e:
        click.echo(f"❌ {e.return_code}: {e.message}")


# Pick Commands
@cli.group()
def pick():
    """Pick management commands"""
    pass


@pick.command("set")
@click.argument("fixture_id", type=int)
@click.argument("user_id", type=int)
@click.argument("team")
@click.option("--admin", "admin_id", type=int, default=None, help="Organiser entering the pick")
@with_appcontext
def set_pick(fixture_id, user_id, team, admin_id):
    """Set a player's pick for the fixture's round"""
    chosen = db.session.get(Fixture, fixture_id)
    if not chosen:
        click.echo(f"❌ Fixture {fixture_id} not found!")
        return

    new_pick, message = Pick.create_pick(
        chosen.round, user_id, chosen, team.upper(), set_by_admin=admin_id
    )
    if new_pick is None:
        click.echo(f"❌ {message}")
        return

    db.session.commit()
    click.echo(f"✅ {message}")


# Settlement Commands
@cli.command()
@click.argument("round_id", type=int)
@click.option("--organiser", "organiser_id", type=int, required=True, help="Organiser user id")
@with_appcontext
def settle(round_id, organiser_id):
    """Calculate results for a round"""
    try:
        summary = settle_round(round_id, organiser_id)
    except SettlementError as e:
        click.echo(f"❌ {e.return_code}: {e.message}")
        return

    click.echo(f"✅ Round {summary.round_number} settled")
    click.echo(f"   Winners: {summary.winners}")
    click.echo(f"   Losers: {summary.losers} (draws: {summary.draws})")
    click.echo(f"   No pick: {summary.no_pick_processed}")
    click.echo(f"   Eliminated: {summary.players_eliminated}")
    click.echo(f"   Active players: {summary.active_players}")
    if summary.competition_complete:
        click.echo("🏆 Competition complete")


# Database Commands
@cli.group("db")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


@db_cmd.command("init-migrations")
@click.option("--directory", default=None, help="Migrations directory (defaults to MIGRATIONS_DIR)")
@with_appcontext
def init_migrations(directory):
    """Initialize migrations repository"""
    from flask import current_app

    directory = directory or current_app.extensions["migrate"].directory
    if os.path.exists(directory):
        click.echo(f"❌ Migrations directory {directory} already exists!")
        return

    flask_migrate_init(directory=directory)
    click.echo(f"✅ Migrations repository initialized in {directory}")


@db_cmd.command("migrate")
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Autogenerate a migration from model changes"""
    migrate(message=message)
    click.echo(f"✅ Migration created: {message}")


@db_cmd.command("upgrade")
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to the database"""
    upgrade(revision=revision)
    click.echo(f"✅ Migrations applied to {revision}")


@db_cmd.command("downgrade")
@click.option("--revision", required=True, help="Revision to downgrade to")
@with_appcontext
def rollback_migration(revision):
    """Roll migrations back to a revision"""
    downgrade(revision=revision)
    click.echo(f"✅ Rolled back to {revision}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
