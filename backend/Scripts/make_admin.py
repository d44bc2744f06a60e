# Usage:
#   python Scripts/make_admin.py <username>
#   python Scripts/make_admin.py <username> --revoke

import argparse

from app.db.init_db import init_db
from app.db.session import session_scope
from app.storage import SqlStore


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("username")
    ap.add_argument("--revoke", action="store_true", help="Remove admin rights instead of granting them")
    args = ap.parse_args()

    init_db()
    with session_scope() as db:
        store = SqlStore(db)
        u = store.get_user_by_username(args.username)
        if not u:
            print("User not found")
            return
        store.set_admin(u.id, not args.revoke)
        print(f"OK: {u.username} is_admin={not args.revoke}")


if __name__ == "__main__":
    main()
