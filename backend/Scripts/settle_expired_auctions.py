# Cierra y liquida las subastas activas cuyo end_time ya pasó.
# Pensado para cron, p.ej. cada minuto:
#   * * * * * cd /srv/gamedraft/backend && python Scripts/settle_expired_auctions.py

import logging

from app.core.config import settings
from app.db.init_db import init_db
from app.db.session import session_scope
from app.services.auction_engine import settle_expired_auctions
from app.storage import SqlStore


def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    init_db()
    with session_scope() as db:
        settled = settle_expired_auctions(SqlStore(db))

    for a in settled:
        winner = a.current_winner_id if a.current_winner_id is not None else "-"
        print(f"auction={a.id} player={a.player_id} price={a.current_price} winner={winner}")
    print(f"DONE. Settled {len(settled)} auction(s).")


if __name__ == "__main__":
    main()
