import json

from db.models.leaderboard import Player
from scripts.seed_players import main, seed_players


def test_seed_creates_new_players_and_skips_known(make_player):
    make_player("Ahri")

    created, skipped = seed_players(
        [
            {"name": "Ahri"},
            {"name": "Brand", "avatar": "https://avatars.test/brand.png"},
            {"name": "  "},
            {"name": "Brand"},
        ]
    )

    assert (created, skipped) == (1, 3)
    assert sorted(p.name for p in Player.select()) == ["Ahri", "Brand"]
    assert Player.get(Player.name == "Brand").avatar == "https://avatars.test/brand.png"


def test_seed_dry_run_writes_nothing(database):
    created, skipped = seed_players([{"name": "Ahri"}, {"name": "Brand"}], dry_run=True)

    assert (created, skipped) == (2, 0)
    assert Player.select().count() == 0


def test_main_reads_json_file(tmp_path, config, capsys):
    roster = tmp_path / "players.json"
    roster.write_text(json.dumps([{"name": "Ahri"}, {"name": "Cait"}]), encoding="utf-8")

    main(roster, database_url=config.database_url)

    assert "Created 2 players, skipped 0" in capsys.readouterr().out
