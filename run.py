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

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Competition": Competition,
        "CompetitionPlayer": CompetitionPlayer,
        "Round": Round,
        "Fixture": Fixture,
        "Pick": Pick,
        "PlayerProgress": PlayerProgress,
        "AuditLog": AuditLog,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
