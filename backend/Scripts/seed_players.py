from decimal import Decimal

from app.db.init_db import init_db
from app.db.session import session_scope
from app.storage import SqlStore


def _player(username, real_name, specialty, level, accuracy, reaction_time, strategy, win_rate, experience, rating, **extra):
    return dict(
        username=username,
        real_name=real_name,
        specialty=specialty,
        level=level,
        accuracy=accuracy,
        reaction_time=reaction_time,
        strategy=strategy,
        win_rate=win_rate,
        experience=experience,
        rating=rating,
        owner_id=None,
        is_released=True,
        available_for_auction=True,
        **extra,
    )


def run():
    init_db()
    with session_scope() as db:
        _seed(SqlStore(db))


def _seed(store):
    # Si ya hay jugadores, no duplicamos
    if store.list_players():
        print("Players already seeded.")
        return

    items = [
        _player("ShadowSniper", "Alex Chen", "FPS Expert", 87, 94, 89, 78, 68, 5, 4.5, combat=92, map_awareness=81),
        _player("StrategyQueen", "Sarah Johnson", "MOBA Captain", 92, 82, 85, 96, 72, 7, 4.8, leadership=95, team_coordination=93),
        _player("BattleRoyale", "Mike Torres", "BR Specialist", 85, 88, 91, 84, 64, 4, 4.2, survival_skills=90, resource_management=86),
        _player("TacticalMind", "Emma Rossi", "Tactical Shooter", 80, 86, 83, 90, 61, 3, 4.0, map_awareness=88),
        _player("NightOwl", "Kenji Sato", "Fighting Games", 78, 90, 95, 72, 70, 6, 4.3, combat=94),
        _player("IronWall", "Lucas Moreau", "MOBA Support", 74, 70, 76, 88, 59, 2, 3.6, team_coordination=91, base_price=Decimal("4000")),
        _player("VortexAim", "Priya Nair", "FPS Expert", 83, 92, 88, 75, 66, 4, 4.1, combat=87),
        _player("LastCircle", "Tom Becker", "BR Specialist", 76, 79, 82, 80, 58, 3, 3.8, survival_skills=88, base_price=Decimal("4500")),
    ]

    for item in items:
        store.create_player(**item)
    print(f"Seed PLAYERS OK ({len(items)} players)")


if __name__ == "__main__":
    run()
